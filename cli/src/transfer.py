#!/usr/bin/env python3
"""
Path classification and byte-stream copying between Cloud Storage objects,
local files and the standard streams.

A path string is one of three kinds:

    gs://bucket/key   RemotePath
    -                 StdioPath (stdin as a source, stdout as a destination)
    anything else     LocalPath

A destination of "." names a local file after the last "/" segment of the
source path.
"""
import logging
import sys
import time
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import gcs_client
from errors import CommitError, OpenError, OperationTimeout, PathParseError, TransferError, UsageError

logger = logging.getLogger(__name__)

GS_PREFIX = "gs://"
STDIO = "-"
SOURCE_BASENAME = "."
COPY_BUFFER_SIZE = 1024 * 1024


@dataclass(frozen=True)
class RemotePath:
    bucket: str
    key: str

    def __str__(self):
        return f"{GS_PREFIX}{self.bucket}/{self.key}"


@dataclass(frozen=True)
class StdioPath:

    def __str__(self):
        return STDIO


@dataclass(frozen=True)
class LocalPath:
    path: str

    def __str__(self):
        return self.path


PathRef = Union[RemotePath, StdioPath, LocalPath]


class Deadline:
    """Bounds an operation to a fixed window; seconds of 0 or None never expire."""

    def __init__(self, seconds, clock=time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds if seconds else None

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(self._expires_at - self._clock(), 0.0)

    def check(self, operation: str):
        if self._expires_at is not None and self._clock() >= self._expires_at:
            raise OperationTimeout(f"{operation} exceeded the {self.seconds}s operation timeout")


def is_gs_path(path: str) -> bool:
    return path.startswith(GS_PREFIX)


def parse_gs_path(path: str, allow_empty_key: bool = False) -> Tuple[str, str]:
    """Split gs://bucket/key into (bucket, key) on the first "/" after the bucket"""
    if not is_gs_path(path):
        raise PathParseError(f"Not a {GS_PREFIX} path: {path}")

    bucket, sep, key = path[len(GS_PREFIX):].partition("/")
    if not sep:
        raise PathParseError(f"Malformed path {path}: expected {GS_PREFIX}<bucket>/<key>")
    if not bucket:
        raise PathParseError(f"Malformed path {path}: empty bucket name")
    if not key and not allow_empty_key:
        raise PathParseError(f"Malformed path {path}: empty object name")
    return bucket, key


def classify_path(path: str) -> PathRef:
    if is_gs_path(path):
        return RemotePath(*parse_gs_path(path))
    if path == STDIO:
        return StdioPath()
    return LocalPath(path)


def destination_for(src_path: str, dst_path: str) -> str:
    """Resolve a "." destination to the basename of the source path"""
    if dst_path != SOURCE_BASENAME:
        return dst_path

    if src_path == STDIO:
        raise UsageError("Cannot derive a destination name from standard input")
    name = src_path.split("/")[-1]
    if not name:
        raise UsageError(f"Cannot derive a destination name from {src_path}")
    return name


def _open_local(path, mode):
    return open(path, mode)


@contextmanager
def open_reader(ref: PathRef, client=None, deadline=None, stdin=None):
    """Open ref as a binary source, released when the block exits"""
    timeout = deadline.remaining() if deadline else None

    if isinstance(ref, StdioPath):
        # stdin belongs to the process, never close it
        yield stdin if stdin is not None else sys.stdin.buffer
        return

    if isinstance(ref, RemotePath):
        reader = gcs_client.open_object_reader(client, ref.bucket, ref.key, timeout=timeout)
    else:
        try:
            reader = _open_local(ref.path, "rb")
        except OSError as e:
            raise OpenError(f"Cannot open {ref.path}: {e.strerror or e}") from e

    with reader:
        yield reader


@contextmanager
def open_writer(ref: PathRef, client=None, deadline=None, stdout=None, chunk_size=None):
    """Open ref as a binary sink.

    On a clean exit the sink is committed: files are closed, objects are
    finalized and stdout is flushed. If the block raises, files are closed
    and pending uploads are discarded before the error propagates.
    """
    timeout = deadline.remaining() if deadline else None

    if isinstance(ref, StdioPath):
        stream = stdout if stdout is not None else sys.stdout.buffer
        yield stream
        try:
            stream.flush()
        except BrokenPipeError:
            raise
        except OSError as e:
            raise CommitError(f"Failed to flush standard output: {e}") from e
        return

    if isinstance(ref, RemotePath):
        writer = gcs_client.open_object_writer(
            client, ref.bucket, ref.key, timeout=timeout, chunk_size=chunk_size
        )
        try:
            yield writer
        except BaseException:
            writer.discard()
            raise
        writer.commit()
        return

    try:
        handle = _open_local(ref.path, "wb")
    except OSError as e:
        raise OpenError(f"Cannot create {ref.path}: {e.strerror or e}") from e

    try:
        yield handle
    except BaseException:
        # the error already in flight is the one to report
        with suppress(OSError):
            handle.close()
        raise
    try:
        handle.close()
    except OSError as e:
        raise CommitError(f"Failed to close {ref.path}: {e}") from e


def copy_stream(reader, writer, deadline=None, buffer_size=COPY_BUFFER_SIZE) -> int:
    """Copy every byte from reader to writer, returns the byte count"""
    total = 0
    while True:
        if deadline is not None:
            deadline.check("Copy")
        try:
            chunk = reader.read(buffer_size)
        except Exception as e:
            raise TransferError(f"Read failed after {total} bytes: {e}") from e
        if not chunk:
            return total
        try:
            writer.write(chunk)
        except BrokenPipeError:
            # reader of our stdout went away, not a transfer failure
            raise
        except Exception as e:
            raise TransferError(f"Write failed after {total} bytes: {e}") from e
        total += len(chunk)


def copy(src_path, dst_path, settings=None, client=None, stdin=None, stdout=None) -> int:
    """Copy src_path to dst_path, returns the number of bytes copied"""
    settings = settings or {}
    dst_path = destination_for(src_path, dst_path)
    src = classify_path(src_path)
    dst = classify_path(dst_path)

    deadline = Deadline(settings.get('timeout_seconds'))
    if client is None and (isinstance(src, RemotePath) or isinstance(dst, RemotePath)):
        client = gcs_client.get_storage_client(settings)

    logger.info("Copying %s -> %s", src, dst)
    with open_reader(src, client=client, deadline=deadline, stdin=stdin) as reader:
        with open_writer(dst, client=client, deadline=deadline, stdout=stdout,
                         chunk_size=settings.get('chunk_size')) as writer:
            total = copy_stream(reader, writer, deadline=deadline)

    logger.info("Copied %d bytes to %s", total, dst)
    return total
