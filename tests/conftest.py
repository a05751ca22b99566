from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture()
def write_json(tmp_path: Path):
    """Write a JSON document to a temporary file and return its path."""

    def _write(data: Any, name: str = "input.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def loop_module() -> dict:
    """
    A small module: begin -> loop body (with tracepoint) -> end, where the
    loop can also bail out to an error block that never reaches end.
    """
    return {
        "functions": [
            {
                "name": "main",
                "blocks": [
                    {
                        "name": "entry",
                        "instructions": [
                            "%0 = alloca i32",
                            "call void @besc_tracepoint_begin()",
                            "br label %loop",
                        ],
                        "successors": ["loop"],
                    },
                    {
                        "name": "loop",
                        "instructions": [
                            "call void @besc_tracepoint_body()",
                            "br i1 %c, label %loop, label %exit",
                        ],
                        "successors": ["loop", "exit"],
                    },
                    {
                        "name": "exit",
                        "instructions": [
                            "call void @besc_tracepoint_end()",
                            "ret void",
                        ],
                        "successors": [],
                    },
                ],
            }
        ]
    }
