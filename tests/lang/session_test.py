import contextlib
import io
import os
import sys
import tempfile
import unittest
from unittest import mock

from lim.lang.error import ErrorHandler, LimException, LimRuntimeError, ParseFailure
from lim.lang.session import Session


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"ANSI_COLORS_DISABLED": "1"})
        patcher.start()
        self.addCleanup(patcher.stop)

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = tmp.name

    def write(self, name, source):
        path = os.path.join(self.dir, name)
        with open(path, "w") as file:
            file.write(source)
        return path

    def shell_session(self):
        return Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)

    def test_file_session(self):
        path = self.write("prog.lim", 'int a = 5\nfn double(int x) int { return x * 2 }\nprint(double(a))\n')
        sess = Session(ErrorHandler(), path, cmd_line=False)
        self.assertEqual(1, len(sess.to_exec))
        self.assertTrue(sess.error_handler.fatal)

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            sess.run()

        self.assertEqual("10\n", out.getvalue())
        self.assertEqual([], sess.to_exec)
        self.assertEqual(5, sess.env.get("a").value)

    def test_missing_file(self):
        path = os.path.join(self.dir, "missing.lim")
        with self.assertRaises(LimException) as cm:
            Session(ErrorHandler(), path, cmd_line=False)
        self.assertEqual(f"'{path}' could not be opened", cm.exception.text)

    def test_reserved_filename(self):
        self.assertRaises(LimException, Session, ErrorHandler(), Session.SH_FILE, cmd_line=False)

    def test_parse_failure(self):
        path = self.write("bad.lim", "int = 5\nint y = 1\nx := 5abc\n")
        with self.assertRaises(ParseFailure) as cm:
            Session(ErrorHandler(), path, cmd_line=False)

        self.assertEqual([1, 3], [error.line for error in cm.exception.errors])
        self.assertEqual(f"could not parse {path}: 2 errors", cm.exception.text)

    def test_runtime_error(self):
        sess = self.shell_session()
        sess.add("int a = 1")
        sess.add("a + true")
        sess.add("int b = 2")

        with self.assertRaises(LimRuntimeError) as cm:
            sess.run()

        self.assertEqual("type mismatch: INTEGER + BOOLEAN", cm.exception.text)
        self.assertEqual(1, sess.env.get("a").value)
        self.assertIsNone(sess.env.get("b"))

    def test_shared_environment(self):
        sess = self.shell_session()
        self.assertFalse(sess.error_handler.fatal)

        sess.add("x := 5")
        sess.run()
        self.assertEqual([], sess.results)

        sess.add("fn times(int n) int { return x * n }")
        sess.add("times(2)")
        sess.run()
        self.assertEqual("10", sess.pop().inspect())
        self.assertEqual([], sess.results)

    def test_deep_recursion(self):
        sess = self.shell_session()
        limit = sys.getrecursionlimit()

        sess.add("fn count(int n) int {\n  if n == 0 { return 0 }\n  return count(n - 1)\n}")
        sess.add("count(800)")
        sess.run()

        self.assertEqual("0", sess.pop().inspect())
        self.assertEqual(limit, sys.getrecursionlimit())

    def test_recursion_limit_is_restored_on_error(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True, recursion_limit=5000)
        limit = sys.getrecursionlimit()

        sess.add("1 / 0")
        self.assertRaises(LimRuntimeError, sess.run)
        self.assertEqual(limit, sys.getrecursionlimit())

    def test_warnings(self):
        sess = self.shell_session()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            sess.add("1 /* dangling", 4)

        self.assertEqual("<in>:4:3: warning: unterminated block comment\n  1 /* dangling\n    ^~\n", out.getvalue())
        self.assertEqual(1, len(sess.to_exec))

    def test_preprocess_line(self):
        cases = [
            (("int x = 1", ""), ("int x = 1\n", False)),
            (("fn f() int {", ""), ("fn f() int {\n", True)),
            (("return 1", "fn f() int {\n"), ("fn f() int {\nreturn 1\n", True)),
            (("}", "fn f() int {\nreturn 1\n"), ("fn f() int {\nreturn 1\n}\n", False)),
            (("add(1,", ""), ("add(1,\n", True)),
            (('print("{")', ""), ('print("{")\n', False)),
        ]
        for args, result in cases:
            self.assertEqual(result, Session.preprocess_line(*args))


if __name__ == '__main__':
    unittest.main()
