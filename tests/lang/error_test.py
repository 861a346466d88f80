import contextlib
import io
import os
import unittest
from unittest import mock

from lim.lang.error import ErrorHandler, LimException, LimRuntimeError, ParseError, ParseFailure


class ErrorTestCase(unittest.TestCase):

    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"ANSI_COLORS_DISABLED": "1"})
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_message(self):
        error = LimException("unknown name {} in {}", ["x", "f"])
        self.assertEqual("unknown name x in f", error.text)
        self.assertEqual("unknown name x in f", str(error))
        self.assertEqual("x", error.expr)

        error = LimRuntimeError("weird {message}")
        self.assertEqual("weird {message}", error.text)

    def test_location(self):
        error = ParseError("bad", source="int = 5", line=3, start=4, end=5)
        self.assertEqual("main.lim:3:5", error.location("main.lim"))
        self.assertEqual(4, error.col)
        self.assertEqual("main.lim", LimException("bad").location("main.lim"))

    def test_diagnose(self):
        error = ParseError("bad", source="abc def", line=1, start=4, end=7)
        self.assertEqual("  abc def\n      ^~~", ErrorHandler.diagnose(error))

        error = ParseError("bad", source="abc", line=1, start=3, end=3)
        self.assertEqual("  abc\n     ^", ErrorHandler.diagnose(error))

    def test_format(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("f.lim")

        error = ParseError("unexpected {}, expected an expression", "'*'", source="x := * 3", line=2, start=5,
                           end=6)
        self.assertEqual("f.lim:2:6: error: unexpected '*', expected an expression\n  x := * 3\n       ^",
                         handler.format(error))
        self.assertTrue(handler.format(error, warning=True).startswith("f.lim:2:6: warning: "))

        self.assertEqual("error: division by zero", handler.format(LimRuntimeError("division by zero")))
        internal = LimException("unknown error", internal=True)
        self.assertEqual("[internal] error: unknown error", handler.format(internal))

    def test_throw(self):
        first = ParseError("first", source="a", line=1, start=0, end=1)
        second = ParseError("second", source="b", line=2, start=0, end=1)
        failure = ParseFailure([first, second], "f.lim")
        self.assertEqual("could not parse f.lim: 2 errors", failure.text)

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            ErrorHandler(fatal=False).throw(failure)

        lines = out.getvalue().splitlines()
        self.assertIn("error: first", lines[0])
        self.assertIn("error: second", lines[3])
        self.assertEqual("error: could not parse f.lim: 2 errors", lines[-1])

        with contextlib.redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                ErrorHandler().throw(LimRuntimeError("boom"))
        self.assertEqual(1, cm.exception.code)

    def test_context_manager(self):
        cases = {
            ParseError("bad syntax"): "error: bad syntax",
            RecursionError(): "error: maximum recursion depth exceeded during evaluation",
            KeyboardInterrupt(): "error: keyboard interrupt",
        }
        for exc, message in cases.items():
            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                with ErrorHandler(fatal=False):
                    raise exc
            self.assertEqual(message + "\n", out.getvalue())

    def test_internal_errors_propagate(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            with self.assertRaises(ValueError):
                with ErrorHandler(fatal=False):
                    raise ValueError("boom")
        self.assertEqual("[internal] error: unknown error: 'ValueError: boom'\n", out.getvalue())


if __name__ == '__main__':
    unittest.main()
