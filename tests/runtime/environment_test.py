import unittest

from lim.runtime.environment import Environment
from lim.runtime.objects import Integer


class EnvironmentTestCase(unittest.TestCase):

    def test_lookup_walks_outward(self):
        outer = Environment()
        outer.set("a", Integer(1))
        inner = outer.enclosed()
        inner.set("b", Integer(2))

        self.assertEqual(1, inner.get("a").value)
        self.assertEqual(2, inner.get("b").value)
        self.assertIsNone(outer.get("b"))
        self.assertIsNone(inner.get("c"))

    def test_set_writes_innermost(self):
        outer = Environment()
        outer.set("a", Integer(1))
        inner = Environment(outer)

        value = Integer(2)
        self.assertIs(value, inner.set("a", value))
        self.assertEqual(2, inner.get("a").value)
        self.assertEqual(1, outer.get("a").value)


if __name__ == '__main__':
    unittest.main()
