"""
Error types for tracepath.

Missing tracepoints are not errors: they are reported through the result
flags. The exceptions here cover the two remaining situations, a broken
input file and a collaborator that handed the analyzer a malformed graph.
"""


class TracepathError(Exception):
    """Base class for all tracepath errors."""
    pass


class InternalError(TracepathError):
    """
    Exception raised when a collaborator breaks its contract.

    This indicates a bug in the code that produced the graph or label map,
    as opposed to a legitimate analysis outcome.
    """
    pass


class MalformedGraphError(InternalError):
    """
    Raised when a graph refers to vertices that do not exist.

    Successor indices and label targets must lie in ``0..N-1``. The
    analyzer fails fast instead of returning a partial result.
    """
    pass


class InputError(TracepathError):
    """
    Exception raised for unreadable or ill-formed input descriptions.

    Args:
        message: Human readable explanation.
        source: Optional name of the file the problem was found in.
    """

    def __init__(self, message, source=None):
        super().__init__(message)
        self.source = source

    def __str__(self):
        message = super().__str__()
        if self.source:
            return "%s: %s" % (self.source, message)
        return message
