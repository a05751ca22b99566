"""Run one start/final tracepoint query against a control flow graph."""

import logging

from tracepath.application.context import AnalysisContext
from .analyzer import TraceAnalyzer
from .result import aggregate

LOG = logging.getLogger(__name__)


def run_query(graph, start_tp, final_tp, context=None):
    """
    Classify the relationship between two tracepoints, keeping the records.

    Missing tracepoints short-circuit the query: no traversal is performed
    and the record table is empty. Otherwise exactly one traversal runs, on
    fresh analyzer state.

    Args:
        graph: ControlFlowGraph with its label map.
        start_tp: Name of the start tracepoint.
        final_tp: Name of the final tracepoint.
        context: Optional AnalysisContext; supplies options and collects
            statistics under ``stats["traversal"]``.

    Returns:
        Tuple of (AnalysisResult, dict of visited vertex -> VertexRecord).
    """
    if context is None:
        context = AnalysisContext()

    contains_start = graph.contains(start_tp)
    contains_final = graph.contains(final_tp)

    if not (contains_start and contains_final):
        for tp, found in ((start_tp, contains_start), (final_tp, contains_final)):
            if not found:
                LOG.info("tracepoint %r not found", tp)
        return aggregate(contains_start, contains_final), {}

    start = graph.vertex_of(start_tp)
    final = graph.vertex_of(final_tp)

    analyzer = TraceAnalyzer(
        graph, start, final, conservative_loops=context.options.conservative_loops
    )
    with context.console.scope("traversal"):
        records = analyzer.analyze()

    stats = context.stats["traversal"]
    stats["vertices"] = len(records)
    stats["edges"] = analyzer.edges_examined

    result = aggregate(True, True, records[start])
    LOG.debug(
        "%s (vertex %d) -> %s (vertex %d): code %d",
        start_tp,
        start,
        final_tp,
        final,
        result.encode(),
    )
    return result, records


def check_trace(graph, start_tp, final_tp, context=None):
    """
    Classify the relationship between two tracepoints.

    Example:
        >>> g = ControlFlowGraph.from_edges(3, [(0, 1), (1, 2)], {"a": 0, "b": 2})
        >>> check_trace(g, "a", "b").encode()
        0

    Returns:
        AnalysisResult
    """
    return run_query(graph, start_tp, final_tp, context)[0]
