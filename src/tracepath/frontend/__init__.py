"""
Graph providers for tracepath.

These modules turn input files into a ControlFlowGraph with its tracepoint
label map. The analysis itself never reads files.
"""

from .blocks import ModuleGraphBuilder, build_graph, called_function
from .loader import graph_from_data, load_graph

__all__ = [
    "ModuleGraphBuilder",
    "build_graph",
    "called_function",
    "graph_from_data",
    "load_graph",
]
