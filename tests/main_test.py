import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from lim.main import main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"ANSI_COLORS_DISABLED": "1"})
        patcher.start()
        self.addCleanup(patcher.stop)

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = tmp.name

    def run_main(self, source, *flags):
        path = os.path.join(self.dir, "prog.lim")
        with open(path, "w") as file:
            file.write(source)

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main([*flags, path])
        return out.getvalue()

    def test_run_file(self):
        source = 'names := ["lim", "world"]\nfn greet(string name) { print("hello", name) }\ngreet(names[1])\n'
        self.assertEqual("hello world\n", self.run_main(source))

    def test_print_ast(self):
        self.assertEqual("int x = (1 + (2 * 3))\nprint(x)\n", self.run_main("x := 1 + 2 * 3; print(x)", "--ast"))

    def test_recursion_limit(self):
        source = "fn count(int n) int {\n  if n == 0 { return 0 }\n  return count(n - 1)\n}\nprint(count(800))\n"
        self.assertEqual("0\n", self.run_main(source))

        with self.assertRaises(SystemExit) as cm:
            self.run_main(source, "--recursion-limit", "300")
        self.assertEqual(1, cm.exception.code)

    def test_errors_exit(self):
        with self.assertRaises(SystemExit) as cm:
            self.run_main("print(1)\n1 / 0\nprint(2)\n")
        self.assertEqual(1, cm.exception.code)

        with self.assertRaises(SystemExit):
            self.run_main("int = 1\n")


if __name__ == '__main__':
    unittest.main()
