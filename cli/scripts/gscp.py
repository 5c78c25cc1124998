#!/usr/bin/env python3
"""
Copy bytes between Cloud Storage objects, local files and standard streams,
and list objects under a prefix
"""
import argparse
import logging
import os
import sys
from contextlib import suppress
from pathlib import Path

from rich.console import Console
from rich.markup import escape

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import config
import listing
import transfer
from errors import GscpError

# stdout carries data, everything else goes to stderr
console = Console(stderr=True)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='gscp',
        description='Copy and list objects in Google Cloud Storage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gscp cp report.txt gs://my-bucket/reports/report.txt   # Upload
  gscp cp gs://my-bucket/reports/report.txt .            # Download to ./report.txt
  gscp cp gs://my-bucket/data.csv - | head               # Stream to stdout
  tar cz src | gscp cp - gs://my-bucket/src.tgz          # Upload from stdin
  gscp ls gs://my-bucket/reports/                        # List a prefix
        """
    )

    subparsers = parser.add_subparsers(dest='command', metavar='command')

    cp = subparsers.add_parser('cp', help='Copy bytes from src to dst',
                               usage='gscp cp <src> <dst>')
    cp.add_argument('src', help="gs://bucket/key, '-' for stdin, or a local path")
    cp.add_argument('dst', help="gs://bucket/key, '-' for stdout, a local path, "
                                "or '.' to use the source file name")

    ls = subparsers.add_parser('ls', help='List objects under a prefix',
                               usage='gscp ls gs://<bucket>/<prefix>')
    ls.add_argument('path', help='gs://bucket/prefix')

    return parser


def configure_logging(level):
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        stream=sys.stderr,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def run_copy(args, settings):
    transfer.copy(args.src, args.dst, settings=settings)


def run_list(args, settings):
    listing.list_objects(args.path, settings=settings)


def silence_stdout():
    """Point stdout at devnull so the interpreter's exit flush cannot fail again"""
    with suppress(OSError, ValueError):
        fd = sys.stdout.fileno()
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, fd)
        os.close(devnull)


COMMANDS = {
    'cp': run_copy,
    'ls': run_list,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_usage(sys.stderr)
        console.print("❌ Missing command: expected one of cp, ls")
        return 2

    try:
        settings = config.get_settings()
        configure_logging(settings['log_level'])
        COMMANDS[args.command](args, settings)
    except GscpError as e:
        console.print(f"❌ {escape(str(e))}")
        return e.exit_code
    except BrokenPipeError:
        # downstream closed early (`gscp ls ... | head`), nothing to report
        silence_stdout()
        return 1
    except KeyboardInterrupt:
        console.print("\n⚠️ Interrupted")
        return 130

    return 0


if __name__ == '__main__':
    sys.exit(main())
