"""
Single-pass trace analysis over a control flow graph.

One depth-first traversal from the start vertex annotates every visited
vertex with three facts at once:

- ``reaches_final``: some path from the vertex reaches the final vertex.
- ``has_avoiding_path``: some path from the vertex never reaches it.
- ``on_cycle``: a cycle was found in the region explored from the vertex.

**Traversal:**
Vertices are colored UNVISITED, IN_PROGRESS (on the active path) or DONE.
The final vertex is terminal: it is marked DONE on first visit and its own
successors are never explored. A successor that is IN_PROGRESS closes a
back edge, and every vertex on the active path from the current vertex up
to that ancestor is marked ``on_cycle``. A DONE successor is reused as-is.

**Combining a finished successor ``to`` into ``v``:**

- ``v.reaches_final |= to.reaches_final``
- if ``to.reaches_final``: ``v.has_avoiding_path |= to.has_avoiding_path``,
  otherwise ``v.has_avoiding_path = True``
- ``v.on_cycle |= to.on_cycle``, but only when ``to.reaches_final`` unless
  the analyzer runs in conservative mode

A vertex without successors starts with ``has_avoiding_path`` set, being
itself the end of an avoiding path.

Back-edge marking covers the whole span of the active path, not just the
cycles lying on a path to final. In conservative mode that span is
propagated upward unconditionally, so LoopFound means "a loop exists in
the visited region". In the default mode it only leaves subtrees that
reach final, so a loop hanging off a dead-end branch is not reported.

The traversal uses an explicit work stack; its depth is bounded only by
memory, not by the interpreter's recursion limit.
"""

import enum
import logging

from tracepath.application.errors import MalformedGraphError

LOG = logging.getLogger(__name__)


class VisitColor(enum.Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


class VertexRecord(object):
    """
    Per-vertex analysis facts.

    A record is created when its vertex is first visited and is frozen once
    its color becomes DONE; the analyzer never mutates it afterwards.
    """

    __slots__ = "reaches_final", "has_avoiding_path", "on_cycle", "color"

    def __init__(
        self,
        reaches_final=False,
        has_avoiding_path=False,
        on_cycle=False,
        color=VisitColor.UNVISITED,
    ):
        self.reaches_final = reaches_final
        self.has_avoiding_path = has_avoiding_path
        self.on_cycle = on_cycle
        self.color = color

    def __repr__(self):
        return "VertexRecord(reaches_final=%r, has_avoiding_path=%r, on_cycle=%r, color=%s)" % (
            self.reaches_final,
            self.has_avoiding_path,
            self.on_cycle,
            self.color.name,
        )

    def __eq__(self, other):
        if not isinstance(other, VertexRecord):
            return NotImplemented
        return (
            self.reaches_final == other.reaches_final
            and self.has_avoiding_path == other.has_avoiding_path
            and self.on_cycle == other.on_cycle
            and self.color == other.color
        )

    __hash__ = None


class TraceAnalyzer(object):
    """
    Annotates the region of a graph reachable from ``start``.

    An analyzer owns its record table and runs once; build a new one for
    every query.

    Attributes:
        graph: The ControlFlowGraph under analysis (read only).
        start: Start vertex.
        final: Final vertex.
        conservative_loops: Propagate cycle marks out of subtrees that do
            not reach final.
        records: Mapping from visited vertex to its VertexRecord.
        edges_examined: Number of successor edges looked at.
    """

    def __init__(self, graph, start, final, conservative_loops=False):
        for role, v in (("start", start), ("final", final)):
            if not graph.is_vertex(v):
                raise MalformedGraphError(
                    "%s vertex %r is not in a graph of %d vertices" % (role, v, len(graph))
                )

        self.graph = graph
        self.start = start
        self.final = final
        self.conservative_loops = conservative_loops

        self.records = {}
        self.edges_examined = 0

        self._path = []
        self._position = {}
        self._finished = False

    def color(self, v):
        """
        Visit color of a vertex.

        Args:
            v: Vertex number.

        Returns:
            VisitColor; UNVISITED for vertices without a record.
        """
        record = self.records.get(v)
        return record.color if record is not None else VisitColor.UNVISITED

    def analyze(self):
        """
        Run the traversal.

        Returns:
            Dict mapping every visited vertex to its finished VertexRecord.
        """
        if self._finished:
            raise RuntimeError("TraceAnalyzer instances analyze only once")
        self._finished = True

        if self._enter(self.start):
            return self.records

        work = [(self.start, iter(self.graph.successors(self.start)))]

        while work:
            v, pending = work[-1]

            for to in pending:
                self.edges_examined += 1
                color = self.color(to)

                if color is VisitColor.UNVISITED:
                    if self._enter(to):
                        self._combine(v, to)
                    else:
                        work.append((to, iter(self.graph.successors(to))))
                        break
                elif color is VisitColor.IN_PROGRESS:
                    self._mark_cycle(v, to)
                else:
                    self._combine(v, to)
            else:
                work.pop()
                self._leave(v)
                if work:
                    self._combine(work[-1][0], v)

        LOG.debug(
            "visited %d of %d vertices, examined %d edges",
            len(self.records),
            len(self.graph),
            self.edges_examined,
        )
        return self.records

    def _enter(self, v):
        """
        First visit of ``v``.

        Returns:
            True if ``v`` is the final vertex and is already DONE.
        """
        if v == self.final:
            self.records[v] = VertexRecord(
                reaches_final=True, has_avoiding_path=False, color=VisitColor.DONE
            )
            return True

        self.records[v] = VertexRecord(
            has_avoiding_path=self.graph.is_sink(v), color=VisitColor.IN_PROGRESS
        )
        self._position[v] = len(self._path)
        self._path.append(v)
        return False

    def _leave(self, v):
        popped = self._path.pop()
        assert popped == v, (popped, v)
        del self._position[v]
        self.records[v].color = VisitColor.DONE

    def _mark_cycle(self, v, ancestor):
        # The active path ends at v, so the span is path[ancestor:].
        for u in self._path[self._position[ancestor]:]:
            self.records[u].on_cycle = True
        LOG.debug("back edge %d -> %d", v, ancestor)

    def _combine(self, v, to):
        record = self.records[v]
        child = self.records[to]

        record.reaches_final |= child.reaches_final
        if child.reaches_final:
            record.has_avoiding_path |= child.has_avoiding_path
        else:
            record.has_avoiding_path = True
        if child.reaches_final or self.conservative_loops:
            record.on_cycle |= child.on_cycle


def analyze(graph, start, final, conservative_loops=False):
    """
    Annotate the region reachable from ``start``.

    Args:
        graph: ControlFlowGraph to analyze.
        start: Start vertex.
        final: Final vertex.
        conservative_loops: See ``TraceAnalyzer``.

    Returns:
        Dict mapping visited vertices to VertexRecord.
    """
    return TraceAnalyzer(graph, start, final, conservative_loops).analyze()
