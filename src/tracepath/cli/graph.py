"""
CLI functionality for inspecting the graph built from an input file.
"""

import json
import sys
from pathlib import Path

from tracepath.analysis.tracepoint import TraceDumper
from tracepath.application.errors import TracepathError
from tracepath.frontend.loader import load_graph
from .check import EXIT_FAILURE, add_common_arguments, configure_logging


def add_graph_parser(subparsers):
    """Add graph subcommand to the argument parser."""
    parser = subparsers.add_parser(
        "graph", help="Show the control flow graph and tracepoints of an input"
    )
    parser.add_argument("input", type=Path, help="JSON graph or module description")
    parser.add_argument(
        "--format",
        "-f",
        choices=["text", "dot", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output", "-o", type=Path, help="Output file (default: stdout)"
    )
    add_common_arguments(parser)
    parser.set_defaults(func=run_graph)


def run_graph(args):
    configure_logging(args)
    try:
        graph = load_graph(args.input, args.prefix)
        output = render(graph, args.format, str(args.input))
        if args.output:
            with open(args.output, "w") as f:
                f.write(output)
        else:
            sys.stdout.write(output)
    except (TracepathError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.output and args.verbose:
        print(f"Graph written to {args.output}")
    return 0


def render(graph, fmt, title):
    dumper = TraceDumper(graph)
    if fmt == "dot":
        return dumper.to_dot(title).to_string()
    if fmt == "json":
        return json.dumps(dumper.to_dict(title), indent=2) + "\n"
    return dumper.to_text(title)
