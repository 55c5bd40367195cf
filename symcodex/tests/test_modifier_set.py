import unittest

from symcodex.codex_modifiers import Modifier, ModifierSet

def ms(raw):
    return ModifierSet.from_raw_dotted(raw)

class TestModifierSet(unittest.TestCase):
    def test_empty(self):
        self.assertTrue(ms("").is_empty())
        self.assertEqual(len(ms("")), 0)
        self.assertEqual(str(ms("")), "")

    def test_canonical_text(self):
        self.assertEqual(str(ms("r.double?")), "r.double?")
        self.assertEqual([str(m) for m in ms("a?.b")], ["a?", "b"])

    def test_order_independent_equality(self):
        self.assertEqual(ms("a.b"), ms("b.a"))
        self.assertEqual(hash(ms("a.b")), hash(ms("b.a")))
        self.assertNotEqual(ms("a.b"), ms("a?.b"))

    def test_insert_raw(self):
        base = ms("a")
        grown = base.insert_raw("b?")
        self.assertEqual(grown, ms("a.b?"))
        self.assertEqual(base, ms("a"))

    def test_contains_ignores_optional_marker(self):
        s = ms("a?.b")
        self.assertTrue(s.contains("a"))
        self.assertIn("b", s)
        self.assertFalse(s.contains("c"))

    def test_preconditions(self):
        for raw in ["a..b", "a.a", "a.a?", "a.1", "?", "a.b_c"]:
            with self.assertRaises(ValueError, msg=raw):
                ms(raw)
        with self.assertRaises(ValueError):
            ms("a").insert_raw("a?")

    def test_modifier_from_raw(self):
        self.assertEqual(Modifier.from_raw("double?"), Modifier("double", True))
        self.assertEqual(Modifier.from_raw("r"), Modifier("r", False))

    def test_subset_with_optional_markers(self):
        self.assertTrue(ms("a").is_subset(ms("a?.b")))
        self.assertTrue(ms("a?").is_subset(ms("a.b")))
        self.assertTrue(ms("a?").is_subset(ms("a?.b")))
        self.assertFalse(ms("a.c").is_subset(ms("a.b")))
        self.assertTrue(ms("").is_subset(ms("")))

    def test_required_is_subset(self):
        self.assertTrue(ms("a?.b").required_is_subset(ms("b")))
        self.assertFalse(ms("a.b?").required_is_subset(ms("b")))
        self.assertTrue(ms("a?.b?").required_is_subset(ms("")))

if __name__ == '__main__':
    unittest.main()
