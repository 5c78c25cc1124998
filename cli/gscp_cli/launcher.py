#!/usr/bin/env python3
"""
Runs a bundled script under the current interpreter.

Installed, the scripts ship inside this package (gscp_cli/scripts); in a
source checkout they sit beside it (cli/scripts).
"""
import subprocess
import sys
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent


def script_path(name, package_dir=PACKAGE_DIR):
    """Locate a bundled script, None if it is missing"""
    for scripts_dir in (package_dir / "scripts", package_dir.parent / "scripts"):
        candidate = scripts_dir / name
        if candidate.is_file():
            return candidate
    return None


def run_script(name, argv=None):
    """Run the script and return its exit status"""
    path = script_path(name)
    if path is None:
        print(f"❌ Cannot find bundled script {name} near {PACKAGE_DIR}", file=sys.stderr)
        return 1

    if argv is None:
        argv = sys.argv[1:]
    # stdin/stdout are inherited so `gscp cp - -` pipes straight through
    result = subprocess.run([sys.executable, str(path)] + list(argv))
    return result.returncode
