"""
Console output and timing for analysis phases.

Phases are nested with ``Console.scope``; each scope reports when it begins
and ends together with the elapsed wall time.
"""

import sys
import time


def elapsedTime(t):
    """
    Format a duration in seconds with a readable unit.

    Example:
        elapsedTime(0.05) -> "   50 ms"
    """
    if t < 1.0:
        return "%5.4g ms" % (t * 1000.0)
    elif t < 60.0:
        return "%5.4g s" % t
    else:
        return "%5.4g m" % (t / 60.0)


class Scope(object):
    """A timed node in the tree of console phases."""

    def __init__(self, parent, name):
        self.parent = parent
        self.name = name
        self._start = None
        self._end = None

    def begin(self):
        self._start = time.perf_counter()

    def end(self):
        self._end = time.perf_counter()

    @property
    def elapsed(self):
        return self._end - self._start

    def path(self):
        """
        Names from the root down to this scope, root excluded.

        Returns:
            Tuple of scope names.
        """
        if self.parent is None:
            return ()
        return self.parent.path() + (self.name,)

    def child(self, name):
        return Scope(self, name)


class ConsoleScopeManager(object):
    """Context manager returned by ``Console.scope``."""

    __slots__ = "console", "name"

    def __init__(self, console, name):
        self.console = console
        self.name = name

    def __enter__(self):
        self.console.begin(self.name)

    def __exit__(self, type, value, tb):
        self.console.end()


class Console(object):
    """
    Hierarchical phase reporting.

    Begin/end lines are only written in verbose mode so that a normal run
    prints nothing but the report.

    Attributes:
        out: Output stream (default: sys.stderr).
        root: Root scope of the hierarchy.
        current: Currently active scope.
        verbose: Whether phase lines are written at all.
    """

    def __init__(self, out=None, verbose=False):
        if out is None:
            out = sys.stderr
        self.out = out

        self.root = Scope(None, "root")
        self.current = self.root

        self.verbose = verbose

    def path(self):
        """Current scope path, e.g. ``[ check | traversal ]``."""
        return "[ %s ]" % " | ".join(self.current.path())

    def begin(self, name):
        scope = self.current.child(name)
        scope.begin()
        self.current = scope

        self.verbose_output("begin %s" % self.path(), 0)

    def end(self):
        self.current.end()
        self.verbose_output(
            "end   %s %s" % (self.path(), elapsedTime(self.current.elapsed)), 0
        )
        self.current = self.current.parent

    def scope(self, name):
        """
        Create a context manager for a timed phase.

        Example:
            with console.scope("traversal"):
                ...
        """
        return ConsoleScopeManager(self, name)

    def output(self, s, tabs=1):
        if tabs:
            self.out.write("\t" * tabs)
        self.out.write(s)
        self.out.write("\n")

    def verbose_output(self, s, tabs=1):
        if self.verbose:
            self.output(s, tabs)
