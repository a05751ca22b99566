"""tracepath - tracepoint trace checking over control flow graphs.
"""

__version__ = "0.1.0"

from .analysis.tracepoint import (
    AnalysisResult,
    ControlFlowGraph,
    TraceState,
    check_trace,
)
from .application.context import AnalysisContext, TraceOptions

__all__ = [
    "AnalysisResult",
    "ControlFlowGraph",
    "TraceState",
    "check_trace",
    "AnalysisContext",
    "TraceOptions",
    "__version__",
]
