"""Run-wide state for tracepath: options, context and errors."""

from .context import AnalysisContext, TraceOptions
from .errors import TracepathError, InternalError, MalformedGraphError, InputError

__all__ = [
    "AnalysisContext",
    "TraceOptions",
    "TracepathError",
    "InternalError",
    "MalformedGraphError",
    "InputError",
]
