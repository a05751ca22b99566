"""
Loading control flow graphs from JSON files.

Two layouts are accepted:

- a module description (top-level ``functions`` key), converted by
  ``tracepath.frontend.blocks``;
- a raw graph: ``{"successors": [[1], [2], []], "labels": {"a": 0},
  "names": [...]}`` where ``names`` is optional.
"""

import json
import logging
from pathlib import Path

from tracepath.analysis.tracepoint.graph import ControlFlowGraph
from tracepath.application.context import DEFAULT_TRACEPOINT_PREFIX
from tracepath.application.errors import InputError, MalformedGraphError
from .blocks import build_graph

LOG = logging.getLogger(__name__)


def graph_from_data(data, prefix=DEFAULT_TRACEPOINT_PREFIX, source=None):
    """
    Build a ControlFlowGraph from decoded JSON.

    Raises:
        InputError: if the data matches neither layout or is inconsistent.
    """
    if not isinstance(data, dict):
        raise InputError("top-level JSON value must be an object", source)

    if "functions" in data:
        return build_graph(data, prefix, source)

    successors = data.get("successors")
    if not isinstance(successors, list) or not all(
        isinstance(nexts, list) for nexts in successors
    ):
        raise InputError(
            "expected a 'functions' list or a 'successors' list of lists", source
        )

    labels = data.get("labels", {})
    if not isinstance(labels, dict):
        raise InputError("'labels' must map tracepoint names to vertices", source)

    names = data.get("names")
    if names is not None and not (
        isinstance(names, list) and all(isinstance(name, str) for name in names)
    ):
        raise InputError("'names' must be a list of strings", source)

    try:
        return ControlFlowGraph(successors, labels, names)
    except MalformedGraphError as e:
        # A file is user input, not a collaborator contract.
        raise InputError(str(e), source) from e


def load_graph(path, prefix=DEFAULT_TRACEPOINT_PREFIX):
    """
    Read a graph description from a JSON file.

    Args:
        path: File to read.
        prefix: Tracepoint call prefix for module descriptions.

    Returns:
        ControlFlowGraph
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InputError("cannot read file: %s" % e.strerror, str(path)) from e
    except UnicodeDecodeError as e:
        raise InputError("invalid UTF-8: %s" % e, str(path)) from e
    except json.JSONDecodeError as e:
        raise InputError("invalid JSON: %s" % e, str(path)) from e

    graph = graph_from_data(data, prefix, str(path))
    LOG.info("loaded %r from %s", graph, path)
    return graph
