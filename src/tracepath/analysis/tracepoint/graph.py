"""
Control flow graph and tracepoint label map.

The graph is the input contract of the trace analyzer. Vertices are dense
integers ``0..N-1``, one per basic block, each with an ordered tuple of
successors. Tracepoint names are resolved to vertices through a label map.
A vertex with no successors is a sink of the graph.

Graphs are immutable once built; construction checks that every index is
in range and raises ``MalformedGraphError`` otherwise.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

import networkx as nx

from tracepath.application.errors import MalformedGraphError

LOG = logging.getLogger(__name__)

Vertex = int
TracePoint = str


class ControlFlowGraph(object):
    """
    Directed graph of basic blocks with tracepoint labels.

    Attributes:
        labels: Read-only mapping from tracepoint name to vertex.
        names: Optional per-vertex display names (block names).
    """

    __slots__ = "_successors", "labels", "names"

    def __init__(
        self,
        successors: Sequence[Iterable[Vertex]],
        labels: Optional[Mapping[TracePoint, Vertex]] = None,
        names: Optional[Sequence[str]] = None,
    ):
        self._successors = tuple(tuple(nexts) for nexts in successors)
        self.labels = MappingProxyType(dict(labels or {}))
        self.names = tuple(names) if names is not None else None
        self._validate()

    def _validate(self):
        count = len(self._successors)
        for v, nexts in enumerate(self._successors):
            for to in nexts:
                if not self.is_vertex(to):
                    raise MalformedGraphError(
                        "vertex %d has successor %r outside 0..%d" % (v, to, count - 1)
                    )
        for tp, v in self.labels.items():
            if not self.is_vertex(v):
                raise MalformedGraphError(
                    "tracepoint %r is bound to missing vertex %r" % (tp, v)
                )
        if self.names is not None and len(self.names) != count:
            raise MalformedGraphError(
                "%d names given for %d vertices" % (len(self.names), count)
            )

    def __len__(self):
        return len(self._successors)

    def __repr__(self):
        return "ControlFlowGraph(%d vertices, %d edges, %d labels)" % (
            len(self),
            sum(len(nexts) for nexts in self._successors),
            len(self.labels),
        )

    def is_vertex(self, v) -> bool:
        """True if v is an int (not a bool) in 0..N-1."""
        return isinstance(v, int) and not isinstance(v, bool) and 0 <= v < len(self)

    def successors(self, v: Vertex) -> Tuple[Vertex, ...]:
        """
        Successors of a vertex, in edge order.

        Args:
            v: Vertex number.

        Returns:
            Tuple of vertex numbers, empty for a sink.
        """
        return self._successors[v]

    def is_sink(self, v: Vertex) -> bool:
        """True if v has no successors."""
        return not self._successors[v]

    def vertices(self) -> range:
        return range(len(self))

    def edges(self) -> Iterator[Tuple[Vertex, Vertex]]:
        """Yield (source, target) pairs, grouped by source vertex."""
        for v, nexts in enumerate(self._successors):
            for to in nexts:
                yield v, to

    def contains(self, tp: TracePoint) -> bool:
        """True if tracepoint tp is bound to a vertex."""
        return tp in self.labels

    def vertex_of(self, tp: TracePoint) -> Optional[Vertex]:
        """
        Vertex a tracepoint is bound to.

        Args:
            tp: Tracepoint name.

        Returns:
            Vertex number, or None if tp is not in the label map.
        """
        return self.labels.get(tp)

    def name_of(self, v: Vertex) -> str:
        """Display name of v; the vertex number when no names were given."""
        if self.names is not None:
            return self.names[v]
        return str(v)

    def tracepoints_at(self, v: Vertex):
        """Tracepoint names bound to a vertex, sorted."""
        return sorted(tp for tp, target in self.labels.items() if target == v)

    @classmethod
    def from_edges(
        cls,
        count: int,
        edges: Iterable[Tuple[Vertex, Vertex]],
        labels: Optional[Mapping[TracePoint, Vertex]] = None,
        names: Optional[Sequence[str]] = None,
    ) -> "ControlFlowGraph":
        """
        Build a graph from an edge list.

        Successor order follows edge order.

        Example:
            >>> g = ControlFlowGraph.from_edges(3, [(0, 1), (1, 2)], {"a": 0, "b": 2})
            >>> g.successors(0)
            (1,)
        """
        if count < 0:
            raise MalformedGraphError("negative vertex count %d" % count)
        successors = [[] for _ in range(count)]
        for src, dst in edges:
            if not (
                isinstance(src, int) and not isinstance(src, bool) and 0 <= src < count
            ):
                raise MalformedGraphError(
                    "edge source %r outside 0..%d" % (src, count - 1)
                )
            successors[src].append(dst)
        return cls(successors, labels, names)

    @classmethod
    def from_networkx(
        cls, digraph: nx.DiGraph, label_attr: str = "tracepoint"
    ) -> "ControlFlowGraph":
        """
        Convert a networkx digraph.

        Nodes are numbered in ``digraph.nodes`` order and use ``str(node)`` as
        display name. A node attribute ``label_attr`` holding a
        string (or a list of strings) binds tracepoints to that node.
        """
        if not digraph.is_directed():
            raise MalformedGraphError("control flow graphs must be directed")

        index = {node: i for i, node in enumerate(digraph.nodes)}
        successors = [[index[to] for to in digraph.successors(node)] for node in index]

        labels: Dict[TracePoint, Vertex] = {}
        for node, data in digraph.nodes(data=True):
            bound = data.get(label_attr)
            if bound is None:
                continue
            if isinstance(bound, str):
                bound = [bound]
            for tp in bound:
                labels[tp] = index[node]

        LOG.debug(
            "converted networkx graph with %d nodes and %d labels",
            len(index),
            len(labels),
        )
        return cls(successors, labels, [str(node) for node in index])

    def to_networkx(self, label_attr: str = "tracepoint") -> nx.DiGraph:
        """
        Export as a networkx digraph keyed by vertex number.

        Each node carries ``name`` and, where bound, ``label_attr`` as a list
        of tracepoint names.
        """
        digraph = nx.DiGraph()
        for v in self.vertices():
            digraph.add_node(v, name=self.name_of(v))
            tracepoints = self.tracepoints_at(v)
            if tracepoints:
                digraph.nodes[v][label_attr] = tracepoints
        digraph.add_edges_from(self.edges())
        return digraph
