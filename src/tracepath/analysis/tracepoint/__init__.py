"""
Tracepoint trace analysis.

Given a control flow graph with tracepoint labels and a start/final pair,
one depth-first traversal answers whether both tracepoints exist, whether
final is reachable from start, whether a loop lies on the way, and whether
execution can leave start without ever reaching final.

**Module Structure:**
- graph.py: ControlFlowGraph and its label map
- analyzer.py: single-pass traversal and per-vertex records
- result.py: AnalysisResult flags, encoding and rendering
- query.py: existence checks plus traversal for one query
- dump.py: text, DOT and JSON output of an analyzed graph
"""

from .graph import ControlFlowGraph, Vertex, TracePoint
from .analyzer import TraceAnalyzer, VertexRecord, VisitColor, analyze
from .result import AnalysisResult, TraceState, FLAG_NAMES, aggregate
from .query import check_trace, run_query
from .dump import TraceDumper

__all__ = [
    'ControlFlowGraph',
    'Vertex',
    'TracePoint',
    'TraceAnalyzer',
    'VertexRecord',
    'VisitColor',
    'analyze',
    'AnalysisResult',
    'TraceState',
    'FLAG_NAMES',
    'aggregate',
    'check_trace',
    'run_query',
    'TraceDumper',
]
