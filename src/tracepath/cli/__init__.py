"""
tracepath CLI tools.

- check: classify the trace between two tracepoints
- graph: show the graph and tracepoints built from an input file
"""

from .main import main

__all__ = ["main"]
