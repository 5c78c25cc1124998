#!/usr/bin/env python3
"""
CLI entry point for the gscp command.
Copies and lists Google Cloud Storage objects.
"""
import sys

from gscp_cli.launcher import run_script

def main():
    sys.exit(run_script("gscp.py"))

if __name__ == "__main__":
    main()
