import io
import unittest

from tracepath.application.context import (
    DEFAULT_TRACEPOINT_PREFIX,
    AnalysisContext,
    TraceOptions,
)
from tracepath.util.application.console import Console, elapsedTime


class TestOptions(unittest.TestCase):
    def test_defaults(self):
        options = TraceOptions()
        self.assertFalse(options.conservative_loops)
        self.assertEqual(options.tracepoint_prefix, DEFAULT_TRACEPOINT_PREFIX)

    def test_empty_prefix(self):
        with self.assertRaises(ValueError):
            TraceOptions(tracepoint_prefix="")

    def test_repr_after_rejected_prefix(self):
        options = TraceOptions.__new__(TraceOptions)
        with self.assertRaises(ValueError):
            options.__init__(tracepoint_prefix="")
        self.assertIn("tracepoint_prefix=''", repr(options))

    def test_context_uses_options_verbosity(self):
        context = AnalysisContext(options=TraceOptions(verbose=True))
        self.assertTrue(context.console.verbose)
        self.assertEqual(context.stats["anything"], {})


class TestConsole(unittest.TestCase):
    def test_quiet_scopes_write_nothing(self):
        out = io.StringIO()
        console = Console(out)
        with console.scope("check"):
            pass
        self.assertEqual(out.getvalue(), "")

    def test_verbose_scopes(self):
        out = io.StringIO()
        console = Console(out, verbose=True)
        with console.scope("check"):
            with console.scope("traversal"):
                pass
        lines = out.getvalue().splitlines()

        self.assertEqual(lines[0], "begin [ check ]")
        self.assertEqual(lines[1], "begin [ check | traversal ]")
        self.assertTrue(lines[2].startswith("end   [ check | traversal ]"))
        self.assertTrue(lines[3].startswith("end   [ check ]"))
        self.assertIs(console.current, console.root)

    def test_elapsed_time(self):
        self.assertEqual(elapsedTime(0.05).strip(), "50 ms")
        self.assertEqual(elapsedTime(90.0).strip(), "1.5 m")


if __name__ == "__main__":
    unittest.main()
