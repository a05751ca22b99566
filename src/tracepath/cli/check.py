"""
CLI functionality for checking a start/final tracepoint pair.
"""

import argparse
import logging
import sys
from pathlib import Path

from tracepath.analysis.tracepoint import TraceDumper, run_query
from tracepath.application.context import (
    DEFAULT_TRACEPOINT_PREFIX,
    AnalysisContext,
    TraceOptions,
)
from tracepath.application.errors import TracepathError
from tracepath.frontend.loader import load_graph

LOG = logging.getLogger(__name__)

# Result codes use the low five bits.
EXIT_FAILURE = 32


def configure_logging(args):
    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def options_from_args(args):
    return TraceOptions(
        conservative_loops=getattr(args, "conservative_loops", False),
        tracepoint_prefix=getattr(args, "prefix", DEFAULT_TRACEPOINT_PREFIX),
        verbose=args.verbose,
    )


def tracepoint_prefix(value):
    """Argument type for --prefix; an empty prefix would match every call."""
    if not value:
        raise argparse.ArgumentTypeError("tracepoint prefix must not be empty")
    return value


def add_common_arguments(parser):
    parser.add_argument(
        "--prefix",
        type=tracepoint_prefix,
        default=DEFAULT_TRACEPOINT_PREFIX,
        help="Function name prefix marking tracepoint calls (default: %(default)s)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Debug output"
    )


def add_check_parser(subparsers):
    """Add check subcommand to the argument parser."""
    parser = subparsers.add_parser(
        "check", help="Classify the trace between two tracepoints"
    )
    parser.add_argument("input", type=Path, help="JSON graph or module description")
    parser.add_argument("start", help="Start tracepoint name")
    parser.add_argument("final", help="Final tracepoint name")
    parser.add_argument(
        "--conservative-loops",
        action="store_true",
        help="Report loops anywhere in the visited region, "
        "not only on the way to the final tracepoint",
    )
    parser.add_argument("--dump-text", type=Path, help="Write annotated graph as text")
    parser.add_argument("--dump-dot", type=Path, help="Write annotated graph as DOT")
    parser.add_argument("--dump-json", type=Path, help="Write annotated graph as JSON")
    add_common_arguments(parser)
    parser.set_defaults(func=run_check)


def run_check(args):
    """
    Run a trace check and print the report.

    Returns:
        The encoded result, or EXIT_FAILURE if the input could not be used.
    """
    configure_logging(args)
    context = AnalysisContext(options=options_from_args(args))

    try:
        with context.console.scope("check"):
            with context.console.scope("load"):
                graph = load_graph(args.input, context.options.tracepoint_prefix)
            result, records = run_query(graph, args.start, args.final, context)
            dump(args, graph, records)
    except (TracepathError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return EXIT_FAILURE

    print(result.render())
    print(result.state.message)

    traversal = context.stats.get("traversal")
    if traversal:
        LOG.info(
            "visited %d vertices, examined %d edges",
            traversal["vertices"],
            traversal["edges"],
        )
    return result.encode()


def dump(args, graph, records):
    wanted = [
        (args.dump_text, TraceDumper.dump_text),
        (args.dump_dot, TraceDumper.dump_dot),
        (args.dump_json, TraceDumper.dump_json),
    ]
    if not any(path for path, _ in wanted):
        return

    dumper = TraceDumper(
        graph, records, graph.vertex_of(args.start), graph.vertex_of(args.final)
    )
    title = f"{args.start} -> {args.final}"
    for path, method in wanted:
        if path:
            method(dumper, path, title)
