"""
Result model for a trace check.

An ``AnalysisResult`` holds five independent flags. It has a bit-packed
integer form, used as the process exit status, and a line-per-flag text
form. Both list the flags in the same fixed order:

====================  =====
Flag                  Bit
====================  =====
StartNotFound         16
FinalNotFound         8
FinalUnreachable      4
LoopFound             2
FinalAvoidable        1
====================  =====

``TraceState`` condenses a result to the single most important finding,
with a one-line message for each outcome.
"""

import enum
from dataclasses import dataclass, fields

FLAG_NAMES = (
    "StartNotFound",
    "FinalNotFound",
    "FinalUnreachable",
    "LoopFound",
    "FinalAvoidable",
)


class TraceState(enum.Enum):
    SUCCESS = "OK"
    START_NOT_FOUND = "Start tracepoint was not found"
    FINAL_NOT_FOUND = "Final tracepoint was not found"
    CANT_REACH = "There isn't path between start tracepoint and final tracepoint"
    LOOP_FOUND = "There is loop in trace between start tracepoint and final tracepoint"
    MAYBE_CANT_REACH = (
        "There is path from start tracepoint, but doesn't reach final tracepoint"
    )

    @property
    def message(self):
        return self.value


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of one start/final query.

    When either tracepoint is missing no traversal happens and the last
    three flags are always False.
    """

    start_not_found: bool = False
    final_not_found: bool = False
    final_unreachable: bool = False
    loop_found: bool = False
    final_avoidable: bool = False

    def __post_init__(self):
        if (self.start_not_found or self.final_not_found) and (
            self.final_unreachable or self.loop_found or self.final_avoidable
        ):
            raise ValueError(
                "traversal flags must be False when a tracepoint is missing"
            )

    def flags(self):
        """The five flags, most significant first."""
        return tuple(getattr(self, f.name) for f in fields(self))

    def encode(self):
        """
        Pack the flags into an integer.

        Example:
            >>> AnalysisResult(loop_found=True).encode()
            2
        """
        code = 0
        for flag in self.flags():
            code = (code << 1) | int(flag)
        return code

    def __int__(self):
        return self.encode()

    @classmethod
    def decode(cls, code):
        """Inverse of ``encode``."""
        if not 0 <= code < 1 << len(FLAG_NAMES):
            raise ValueError("result code %r out of range" % (code,))
        count = len(FLAG_NAMES)
        bits = [bool(code >> (count - 1 - i) & 1) for i in range(count)]
        return cls(*bits)

    def render(self):
        """One ``Name: value`` line per flag, in encoding order."""
        return "\n".join(
            "%s: %s" % (name, flag) for name, flag in zip(FLAG_NAMES, self.flags())
        )

    def __str__(self):
        return self.render()

    @property
    def ok(self):
        return not any(self.flags())

    @property
    def state(self):
        """The first set flag as a TraceState, or SUCCESS."""
        states = (
            TraceState.START_NOT_FOUND,
            TraceState.FINAL_NOT_FOUND,
            TraceState.CANT_REACH,
            TraceState.LOOP_FOUND,
            TraceState.MAYBE_CANT_REACH,
        )
        for flag, state in zip(self.flags(), states):
            if flag:
                return state
        return TraceState.SUCCESS


def aggregate(contains_start, contains_final, start_record=None):
    """
    Build the result for a query from label checks and the start record.

    Args:
        contains_start: Whether the start tracepoint is in the label map.
        contains_final: Whether the final tracepoint is in the label map.
        start_record: Finished VertexRecord of the start vertex. Ignored
            when a tracepoint is missing, required otherwise.

    Returns:
        AnalysisResult
    """
    if not (contains_start and contains_final):
        return AnalysisResult(
            start_not_found=not contains_start, final_not_found=not contains_final
        )

    if start_record is None:
        raise ValueError("start record is required when both tracepoints exist")

    return AnalysisResult(
        final_unreachable=not start_record.reaches_final,
        loop_found=start_record.on_cycle,
        final_avoidable=start_record.has_avoiding_path,
    )
