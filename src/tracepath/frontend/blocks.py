"""
Control flow graphs from basic-block module descriptions.

A module description is a compiler-neutral view of a program::

    {"functions": [
        {"name": "main",
         "blocks": [
            {"name": "entry",
             "instructions": ["call void @besc_tracepoint_begin()", "br"],
             "successors": ["loop", "exit"]},
            ...]}]}

A tracepoint is a call to a function whose name starts with the tracepoint
prefix; the rest of the name is the tracepoint. Before the graph is built
every block is split in front of each tracepoint call that is not its first
instruction, so a tracepoint always starts its own vertex. The head of a
split falls through to the tail and the block's successors move to its last
piece. Tails are named ``<block>.1``, ``<block>.2``, ...

Vertices are numbered in order of appearance. When a tracepoint occurs more
than once, the last occurrence wins.
"""

import logging
import re

from tracepath.analysis.tracepoint.graph import ControlFlowGraph
from tracepath.application.context import DEFAULT_TRACEPOINT_PREFIX
from tracepath.application.errors import InputError

LOG = logging.getLogger(__name__)

# "call foo", "call void @foo()", "%1 = tail call i32 @foo(i32 0)"
CALL_RE = re.compile(
    r"^\s*(?:%[\w.]+\s*=\s*)?(?:tail\s+|musttail\s+|notail\s+)?call\b(?:[^@]*@)?\s*([A-Za-z_.$][\w.$]*)"
)


def called_function(instruction):
    """
    Name of the function an instruction calls, or None.

    Instructions are either strings or objects of the form
    ``{"call": "name"}``.
    """
    if isinstance(instruction, dict):
        callee = instruction.get("call")
        return callee if isinstance(callee, str) else None
    if isinstance(instruction, str):
        match = CALL_RE.match(instruction)
        if match:
            return match.group(1)
    return None


class Piece(object):
    """One vertex-to-be: a block, or a part of a split block."""

    __slots__ = "function", "name", "instructions", "successors"

    def __init__(self, function, name, instructions):
        self.function = function
        self.name = name
        self.instructions = instructions
        self.successors = []

    @property
    def qualified_name(self):
        return "%s:%s" % (self.function, self.name)


class ModuleGraphBuilder(object):
    """
    Builds a ControlFlowGraph from a module description.

    Attributes:
        prefix: Name prefix identifying tracepoint calls.
        pieces: Vertices in numbering order, filled by ``build``.
        splits: Number of block splits performed.
    """

    def __init__(self, prefix=DEFAULT_TRACEPOINT_PREFIX, source=None):
        if not prefix:
            raise ValueError("tracepoint prefix must not be empty")
        self.prefix = prefix
        self.source = source
        self.pieces = []
        self.splits = 0

    def tracepoint(self, instruction):
        """
        Tracepoint name called by an instruction.

        Returns:
            The callee name without the prefix, or None if the instruction
            is not a tracepoint call.
        """
        callee = called_function(instruction)
        if callee is not None and callee.startswith(self.prefix) and len(callee) > len(self.prefix):
            return callee[len(self.prefix):]
        return None

    def error(self, message):
        return InputError(message, self.source)

    def build(self, module):
        if not isinstance(module, dict) or not isinstance(module.get("functions"), list):
            raise self.error("module description needs a 'functions' list")

        for function in module["functions"]:
            self._add_function(function)

        index = {piece: v for v, piece in enumerate(self.pieces)}
        successors = [[index[to] for to in piece.successors] for piece in self.pieces]

        labels = {}
        for v, piece in enumerate(self.pieces):
            for instruction in piece.instructions:
                tp = self.tracepoint(instruction)
                if tp is None:
                    continue
                if tp in labels and labels[tp] != v:
                    LOG.warning(
                        "tracepoint %r occurs more than once, using %s",
                        tp,
                        piece.qualified_name,
                    )
                labels[tp] = v

        LOG.debug(
            "built %d vertices (%d splits), %d tracepoints",
            len(self.pieces),
            self.splits,
            len(labels),
        )
        return ControlFlowGraph(
            successors, labels, [piece.qualified_name for piece in self.pieces]
        )

    def _add_function(self, function):
        if not isinstance(function, dict) or not isinstance(function.get("name"), str):
            raise self.error("every function needs a 'name'")
        fname = function["name"]
        blocks = function.get("blocks", [])
        if not isinstance(blocks, list):
            raise self.error("function %r: 'blocks' must be a list" % fname)

        first = {}
        last = {}
        targets = []
        for block in blocks:
            if not isinstance(block, dict) or not isinstance(block.get("name"), str):
                raise self.error("function %r: every block needs a 'name'" % fname)
            bname = block["name"]
            if bname in first:
                raise self.error("function %r: duplicate block %r" % (fname, bname))

            pieces = self._split(fname, bname, block.get("instructions", []))
            for head, tail in zip(pieces, pieces[1:]):
                head.successors.append(tail)
            self.pieces.extend(pieces)

            first[bname] = pieces[0]
            last[bname] = pieces[-1]
            targets.append((bname, block.get("successors", [])))

        for bname, names in targets:
            if not isinstance(names, list):
                raise self.error(
                    "function %r, block %r: 'successors' must be a list" % (fname, bname)
                )
            for name in names:
                if name not in first:
                    raise self.error(
                        "function %r, block %r: unknown successor %r" % (fname, bname, name)
                    )
                last[bname].successors.append(first[name])

    def _split(self, fname, bname, instructions):
        if not isinstance(instructions, list):
            raise self.error(
                "function %r, block %r: 'instructions' must be a list" % (fname, bname)
            )
        pieces = [Piece(fname, bname, instructions[:1])]
        for instruction in instructions[1:]:
            if self.tracepoint(instruction) is not None:
                self.splits += 1
                pieces.append(Piece(fname, "%s.%d" % (bname, len(pieces)), []))
            pieces[-1].instructions.append(instruction)
        return pieces


def build_graph(module, prefix=DEFAULT_TRACEPOINT_PREFIX, source=None):
    """Convenience wrapper around ModuleGraphBuilder."""
    return ModuleGraphBuilder(prefix, source).build(module)
