#!/usr/bin/env python3
"""
CLI entry point for gscp-setup-config command.
Creates or checks the gscp configuration file.
"""
import sys

from gscp_cli.launcher import run_script

def main():
    sys.exit(run_script("setup_config.py"))

if __name__ == "__main__":
    main()
