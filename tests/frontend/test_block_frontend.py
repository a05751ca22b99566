"""
Tests for building control flow graphs from module descriptions.

This module tests:
- recognition of call instructions and tracepoint calls
- splitting blocks in front of tracepoint calls
- vertex numbering and successor wiring
- label resolution
- the JSON loader for both input layouts
"""

import unittest

import pytest

from tracepath.analysis.tracepoint import check_trace
from tracepath.application.errors import InputError
from tracepath.frontend import build_graph, called_function, graph_from_data, load_graph


def module(*blocks, name="main"):
    return {"functions": [{"name": name, "blocks": list(blocks)}]}


def block(name, instructions=(), successors=()):
    return {"name": name, "instructions": list(instructions), "successors": list(successors)}


class TestCalledFunction(unittest.TestCase):
    def test_llvm_style(self):
        self.assertEqual(called_function("call void @besc_tracepoint_a()"), "besc_tracepoint_a")
        self.assertEqual(called_function("%3 = tail call i32 @foo(i32 1)"), "foo")

    def test_plain_style(self):
        self.assertEqual(called_function("call bar"), "bar")

    def test_object_style(self):
        self.assertEqual(called_function({"call": "baz"}), "baz")
        self.assertIsNone(called_function({"op": "br"}))

    def test_not_a_call(self):
        self.assertIsNone(called_function("br label %exit"))
        self.assertIsNone(called_function("%x = add i32 %a, %b"))
        self.assertIsNone(called_function(42))


class TestSplitting(unittest.TestCase):
    def test_no_split_at_first_instruction(self):
        g = build_graph(module(block("entry", ["call void @besc_tracepoint_a()", "ret void"])))
        self.assertEqual(len(g), 1)
        self.assertEqual(dict(g.labels), {"a": 0})

    def test_split_before_tracepoints(self):
        g = build_graph(
            module(
                block(
                    "entry",
                    [
                        "%0 = alloca i32",
                        "call void @besc_tracepoint_a()",
                        "call void @helper()",
                        "call void @besc_tracepoint_b()",
                        "br label %next",
                    ],
                    ["next"],
                ),
                block("next", ["ret void"]),
            )
        )

        self.assertEqual(g.names, ("main:entry", "main:entry.1", "main:entry.2", "main:next"))
        self.assertEqual(list(g.edges()), [(0, 1), (1, 2), (2, 3)])
        self.assertEqual(dict(g.labels), {"a": 1, "b": 2})

    def test_ordinary_calls_do_not_split(self):
        g = build_graph(module(block("entry", ["nop", "call void @printf()", "ret void"])))
        self.assertEqual(len(g), 1)
        self.assertEqual(dict(g.labels), {})

    def test_bare_prefix_is_not_a_tracepoint(self):
        g = build_graph(module(block("entry", ["nop", "call void @besc_tracepoint_()"])))
        self.assertEqual(len(g), 1)
        self.assertEqual(dict(g.labels), {})

    def test_custom_prefix(self):
        g = build_graph(
            module(block("entry", ["nop", "call void @tp_x()", "call void @besc_tracepoint_y()"])),
            prefix="tp_",
        )
        self.assertEqual(len(g), 2)
        self.assertEqual(dict(g.labels), {"x": 1})


class TestWiring(unittest.TestCase):
    def test_loop_module(self):
        g = build_graph(
            module(
                block("entry", ["call void @besc_tracepoint_begin()"], ["loop"]),
                block("loop", ["nop"], ["loop", "exit"]),
                block("exit", ["call void @besc_tracepoint_end()"]),
            )
        )
        self.assertEqual(list(g.edges()), [(0, 1), (1, 1), (1, 2)])
        self.assertEqual(check_trace(g, "begin", "end").encode(), 2)

    def test_functions_numbered_in_order(self):
        g = build_graph(
            {
                "functions": [
                    {"name": "f", "blocks": [block("a", successors=["b"]), block("b")]},
                    {"name": "g", "blocks": [block("a")]},
                ]
            }
        )
        self.assertEqual(g.names, ("f:a", "f:b", "g:a"))
        self.assertEqual(list(g.edges()), [(0, 1)])

    def test_later_tracepoint_wins(self):
        g = build_graph(
            module(
                block("one", ["call void @besc_tracepoint_t()"]),
                block("two", ["call void @besc_tracepoint_t()"]),
            )
        )
        self.assertEqual(g.vertex_of("t"), 1)

    def test_empty_block(self):
        g = build_graph(module({"name": "entry"}))
        self.assertEqual(len(g), 1)
        self.assertTrue(g.is_sink(0))


class TestErrors(unittest.TestCase):
    def test_empty_prefix(self):
        with self.assertRaises(ValueError):
            build_graph(module(block("entry", ["call void @f()"])), prefix="")

    def test_unknown_successor(self):
        with self.assertRaises(InputError) as cm:
            build_graph(module(block("entry", successors=["nowhere"])), source="m.json")
        self.assertIn("nowhere", str(cm.exception))
        self.assertTrue(str(cm.exception).startswith("m.json: "))

    def test_duplicate_block(self):
        with self.assertRaises(InputError):
            build_graph(module(block("entry"), block("entry")))

    def test_missing_functions(self):
        with self.assertRaises(InputError):
            build_graph({"blocks": []})

    def test_unnamed_block(self):
        with self.assertRaises(InputError):
            build_graph(module({"instructions": []}))

    def test_successors_across_functions_are_unknown(self):
        with self.assertRaises(InputError):
            build_graph(
                {
                    "functions": [
                        {"name": "f", "blocks": [block("a", successors=["b"])]},
                        {"name": "g", "blocks": [block("b")]},
                    ]
                }
            )


def test_load_module(write_json, loop_module):
    g = load_graph(write_json(loop_module))

    assert g.names == ("main:entry", "main:entry.1", "main:loop", "main:exit")
    assert dict(g.labels) == {"begin": 1, "body": 2, "end": 3}
    assert check_trace(g, "begin", "end").encode() == 2
    assert check_trace(g, "end", "begin").encode() == 5


def test_load_raw_graph(write_json):
    path = write_json({"successors": [[1], [2], []], "labels": {"s": 0, "f": 2}})
    g = load_graph(path)
    assert list(g.edges()) == [(0, 1), (1, 2)]
    assert check_trace(g, "s", "f").encode() == 0


def test_raw_graph_out_of_range_is_input_error(write_json):
    path = write_json({"successors": [[7]], "labels": {}})
    with pytest.raises(InputError, match="outside"):
        load_graph(path)


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(InputError, match="invalid JSON"):
        load_graph(path)


def test_missing_file(tmp_path):
    with pytest.raises(InputError, match="cannot read file"):
        load_graph(tmp_path / "absent.json")


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"successors": "nope"},
        {"successors": [[0]], "labels": ["a"]},
        {"nothing": True},
        {"successors": [[]], "names": 5},
        {"successors": [[], []], "names": "ab"},
        {"successors": [[]], "names": [1]},
        {"successors": [[], []], "names": ["one"]},
    ],
)
def test_bad_layouts(data):
    with pytest.raises(InputError):
        graph_from_data(data)


def test_invalid_utf8(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"successors": [[]], "labels": {"\xff": 0}}')
    with pytest.raises(InputError, match="invalid UTF-8"):
        load_graph(path)
