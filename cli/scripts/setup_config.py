#!/usr/bin/env python3
"""
Create or check the gscp configuration file
"""
import argparse
import os
import shutil
import sys
from pathlib import Path

from rich.console import Console

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import config

console = Console()

TEMPLATE = Path(__file__).parent.parent / "config" / "config_template.yaml"


def default_config_path():
    return Path.home() / ".gscp" / "config.yaml"


def is_template(path):
    try:
        return Path(path).read_text() == TEMPLATE.read_text()
    except OSError:
        return False


def setup_config(config_path=None, local_config=Path("config.yaml")):
    """Write the config template (or an existing local config) to config_path"""
    config_path = Path(config_path or default_config_path())

    console.print("gscp - Configuration Setup")
    console.print("=" * 60)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.exists():
        if is_template(config_path):
            console.print(f"✓ Template already in place: {config_path}")
            console.print(f"⚠ Edit {config_path} to change the defaults")
            return True
        else:
            console.print(f"⚠️  EXISTING CONFIG FOUND: {config_path}")
            console.print("❌ REFUSING to overwrite a customized config")
            console.print("   To reset, delete it and run this command again:")
            console.print(f"   rm {config_path}")
        return False

    if local_config.exists():
        ok, issues = config.validate_config(config.load_config(str(local_config)) or {})
        if not ok:
            console.print(f"❌ Local {local_config} is invalid:")
            for issue in issues:
                console.print(f"   - {issue}")
            return False
        shutil.copy2(local_config, config_path)
        console.print(f"✓ Copied {local_config} to: {config_path}")
    else:
        shutil.copy2(TEMPLATE, config_path)
        console.print(f"✓ Copied template to: {config_path}")

    os.chmod(config_path, 0o600)
    console.print("✓ Set permissions (600)")

    console.print("\nSetup complete!")
    console.print(f"Config location: {config_path}")
    return True


def check_existing_config(config_path=None):
    """Report the status of an existing config without making changes"""
    config_path = Path(config_path or default_config_path())

    console.print("gscp - Configuration Status")
    console.print("=" * 50)

    if not config_path.exists():
        console.print("❌ No configuration found")
        console.print(f"   Expected location: {config_path}")
        console.print("   Built-in defaults are in effect")
        return False

    console.print(f"   Location: {config_path}")
    if is_template(config_path):
        console.print("📝 Template configuration (defaults)")

    loaded = config.load_config(str(config_path))
    if loaded is None:
        console.print("❌ Config could not be read")
        return False

    ok, issues = config.validate_config(loaded)
    if ok:
        console.print("✓ Configuration is valid")
    else:
        for issue in issues:
            console.print(f"✗ {issue}")

    perms = oct(os.stat(config_path).st_mode)[-3:]
    if perms == '600':
        console.print(f"✓ Permissions: {perms}")
    else:
        console.print(f"⚠ Permissions: {perms} (should be 600)")

    return ok


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create or check the gscp configuration file')
    parser.add_argument('--check', action='store_true', help='Report config status without changes')
    parser.add_argument('--path', help='Config file location (default: ~/.gscp/config.yaml)')
    args = parser.parse_args(argv)

    if args.check:
        ok = check_existing_config(args.path)
    else:
        ok = setup_config(args.path)
    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
