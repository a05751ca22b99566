"""Main CLI dispatcher for tracepath.

Exit status of ``check`` is the bit-packed analysis result (0-31); input
problems exit with 32.
"""

import argparse
import sys

from tracepath import __version__
from .check import add_check_parser
from .graph import add_graph_parser


def build_parser():
    parser = argparse.ArgumentParser(
        description="tracepath - check traces between tracepoints in a control flow graph",
        prog="tracepath",
    )
    parser.add_argument(
        "--version", action="version", version=f"tracepath {__version__}"
    )

    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", required=True
    )
    add_check_parser(subparsers)
    add_graph_parser(subparsers)
    return parser


def main(argv=None):
    """Main entry point for the tracepath CLI.

    Returns:
        int: Exit code.
    """
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
