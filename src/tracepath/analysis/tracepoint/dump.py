"""
Dumping of analyzed control flow graphs.

**Supported Formats:**
- Text: vertex table with successors, tracepoints and record flags
- DOT: Graphviz rendering via pydot, colored by analysis outcome
- JSON: machine-readable graph, labels and records

**Color Scheme:**
- start: light green, final: light pink
- vertices that reach final: light blue, others: light grey
- vertices marked on a cycle get a red border
- unvisited vertices are dashed
"""

import json
import logging

import pydot

LOG = logging.getLogger(__name__)


class TraceDumper:
    """
    Writes a graph together with the records of one query.

    Attributes:
        graph: The analyzed ControlFlowGraph
        records: Dict of visited vertex -> VertexRecord (may be empty)
        start: Start vertex or None
        final: Final vertex or None
    """

    _colors = {
        "start": "#90EE90",
        "final": "#FFB6C1",
        "reaches": "#87CEEB",
        "avoids": "#E0E0E0",
        "unvisited": "#FFFFFF",
        "cycle": "#FF0000",
    }

    def __init__(self, graph, records=None, start=None, final=None):
        self.graph = graph
        self.records = records or {}
        self.start = start
        self.final = final

    def _role(self, v):
        if v == self.start:
            return "start"
        if v == self.final:
            return "final"
        return ""

    def _flags(self, v):
        record = self.records.get(v)
        if record is None:
            return "unvisited"
        flags = []
        if record.reaches_final:
            flags.append("reaches")
        if record.has_avoiding_path:
            flags.append("avoids")
        if record.on_cycle:
            flags.append("cycle")
        return ",".join(flags) or "-"

    def to_text(self, title=""):
        """
        Render one line per vertex with its successors, flags and tracepoints.

        Args:
            title: Optional title shown in the header line.

        Returns:
            str
        """
        lines = ["Trace graph%s" % (" for %s" % title if title else ""), "=" * 60, ""]
        lines.append(
            "Vertices: %d  Edges: %d  Visited: %d"
            % (len(self.graph), sum(1 for _ in self.graph.edges()), len(self.records))
        )
        lines.append("")
        for v in self.graph.vertices():
            succ = " ".join(str(to) for to in self.graph.successors(v)) or "(sink)"
            line = "%4d %-16s -> %-16s [%s]" % (
                v,
                self.graph.name_of(v),
                succ,
                self._flags(v),
            )
            role = self._role(v)
            if role:
                line += " <%s>" % role
            tracepoints = self.graph.tracepoints_at(v)
            if tracepoints:
                line += " @" + ",".join(tracepoints)
            lines.append(line)
        return "\n".join(lines) + "\n"

    def dump_text(self, output_file, title=""):
        """Write the text dump to output_file."""
        with open(output_file, "w") as f:
            f.write(self.to_text(title))
        LOG.info("text dump written to %s", output_file)

    def to_dot(self, title=""):
        """
        Build the pydot graph.

        Args:
            title: Optional graph label.

        Returns:
            pydot.Dot
        """
        graph = pydot.Dot(graph_type="digraph")
        graph.set_label('"Trace graph%s"' % (" for %s" % title if title else ""))
        graph.set_rankdir("TB")

        for v in self.graph.vertices():
            self._add_dot_node(graph, v)
        for src, dst in self.graph.edges():
            graph.add_edge(pydot.Edge("v%d" % src, "v%d" % dst, fontsize=8))
        return graph

    def _add_dot_node(self, graph, v):
        record = self.records.get(v)
        role = self._role(v)

        if role:
            fill = self._colors[role]
        elif record is None:
            fill = self._colors["unvisited"]
        elif record.reaches_final:
            fill = self._colors["reaches"]
        else:
            fill = self._colors["avoids"]

        label = "%d\\n%s" % (v, self.graph.name_of(v))
        tracepoints = self.graph.tracepoints_at(v)
        if tracepoints:
            label += "\\n@" + ",".join(tracepoints)

        style = "filled" if record is not None else "filled,dashed"
        attrs = dict(
            label='"%s"' % label.replace('"', '\\"'),
            shape="box",
            style='"%s"' % style,
            fillcolor='"%s"' % fill,
            fontsize=10,
        )
        if record is not None and record.on_cycle:
            attrs["color"] = '"%s"' % self._colors["cycle"]
            attrs["penwidth"] = 2
        graph.add_node(pydot.Node("v%d" % v, **attrs))

    def dump_dot(self, output_file, title=""):
        """Write the DOT dump to output_file."""
        with open(output_file, "w") as f:
            f.write(self.to_dot(title).to_string())
        LOG.info("DOT dump written to %s", output_file)

    def to_dict(self, title=""):
        """
        Serializable form of the graph and its records.

        Args:
            title: Stored under the ``title`` key.

        Returns:
            dict with ``title``, ``start``, ``final``, ``vertices`` and
            ``labels``. Unvisited vertices have a ``record`` of None.
        """
        return {
            "title": title,
            "start": self.start,
            "final": self.final,
            "vertices": [
                {
                    "id": v,
                    "name": self.graph.name_of(v),
                    "successors": list(self.graph.successors(v)),
                    "tracepoints": self.graph.tracepoints_at(v),
                    "record": self._record_to_dict(v),
                }
                for v in self.graph.vertices()
            ],
            "labels": dict(self.graph.labels),
        }

    def _record_to_dict(self, v):
        record = self.records.get(v)
        if record is None:
            return None
        return {
            "reaches_final": record.reaches_final,
            "has_avoiding_path": record.has_avoiding_path,
            "on_cycle": record.on_cycle,
        }

    def dump_json(self, output_file, title=""):
        """Write the JSON dump to output_file."""
        with open(output_file, "w") as f:
            json.dump(self.to_dict(title), f, indent=2)
        LOG.info("JSON dump written to %s", output_file)
