"""
Context and options shared by one tracepath run.

**Context Types:**
- `TraceOptions`: user-selectable analysis settings
- `AnalysisContext`: console, options and statistics handed to every phase
"""

import collections

from tracepath.util.application.console import Console

DEFAULT_TRACEPOINT_PREFIX = "besc_tracepoint_"


class TraceOptions(object):
    """
    Settings for a trace check.

    Attributes:
        conservative_loops: If True, a cycle anywhere in the visited region
            sets LoopFound, including cycles in subtrees that never reach the
            final tracepoint. If False, only cycles in subtrees that reach
            final are reported.
        tracepoint_prefix: Name prefix that marks a call as a tracepoint in
            module descriptions.
        verbose: Enable phase timing output.
    """
    __slots__ = "conservative_loops", "tracepoint_prefix", "verbose"

    def __init__(
        self,
        conservative_loops=False,
        tracepoint_prefix=DEFAULT_TRACEPOINT_PREFIX,
        verbose=False,
    ):
        self.conservative_loops = conservative_loops
        self.tracepoint_prefix = tracepoint_prefix
        self.verbose = verbose
        if not tracepoint_prefix:
            raise ValueError("tracepoint prefix must not be empty")

    def __repr__(self):
        return "TraceOptions(conservative_loops=%r, tracepoint_prefix=%r, verbose=%r)" % (
            self.conservative_loops,
            self.tracepoint_prefix,
            self.verbose,
        )


class AnalysisContext(object):
    """
    State shared across the phases of a run.

    Statistics are grouped by phase name, e.g.
    ``context.stats["traversal"]["vertices"]``.

    Attributes:
        console: Console for phase timing
        options: TraceOptions in effect
        stats: Nested defaultdict of per-phase counters
    """
    __slots__ = "console", "options", "stats"

    def __init__(self, console=None, options=None):
        self.options = options if options is not None else TraceOptions()
        self.console = (
            console if console is not None else Console(verbose=self.options.verbose)
        )
        self.stats = collections.defaultdict(dict)
