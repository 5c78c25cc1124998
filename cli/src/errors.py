#!/usr/bin/env python3
"""
Error types raised by gscp operations.

Every error carries the exit status the command line maps it to.
"""


class GscpError(Exception):
    exit_code = 1


class UsageError(GscpError):
    exit_code = 2


class PathParseError(GscpError):
    exit_code = 2


class ConfigError(GscpError):
    pass


class OpenError(GscpError):
    pass


class TransferError(GscpError):
    pass


class OperationTimeout(TransferError):
    pass


class CommitError(GscpError):
    pass


class ListingError(GscpError):
    pass
