import unittest

import symcodex.codex_diag as codex_diag
from symcodex.codex_escape import decode_value

class TestEscapeDecode(unittest.TestCase):
    def test_unicode_escape(self):
        self.assertEqual(decode_value("\\u{2060}"), "\u2060")
        self.assertEqual(decode_value("\\u{1F600}"), "\U0001F600")

    def test_variation_selectors(self):
        self.assertEqual(decode_value("\\vs{16}"), "\ufe0f")
        self.assertEqual(decode_value("\\vs{emoji}"), "\ufe0f")
        self.assertEqual(decode_value("\\vs{text}"), "\ufe0e")
        self.assertEqual(decode_value("\\vs{1}"), "\ufe00")

    def test_combining_not(self):
        self.assertEqual(decode_value("=\\c{not}"), "=\u0338")

    def test_literal_and_escapes_mixed(self):
        self.assertEqual(decode_value("a\\u{62}c\\vs{15}"), "abc\ufe0e")

    def test_plain_literal(self):
        self.assertEqual(decode_value("→"), "→")

    def test_unterminated_escape(self):
        with self.assertRaises(codex_diag.CodexError) as cm:
            decode_value("\\u{2060")
        self.assertEqual(cm.exception.code, codex_diag.E_UNTERMINATED_ESCAPE)

    def test_invalid_codepoint(self):
        for raw in ["\\u{}", "\\u{xyz}", "\\u{D800}", "\\u{110000}", "\\u{+41}"]:
            with self.assertRaises(codex_diag.CodexError) as cm:
                decode_value(raw)
            self.assertEqual(cm.exception.code, codex_diag.E_INVALID_CODEPOINT, raw)

    def test_invalid_escapes(self):
        for raw in ["\\vs{17}", "\\c{yes}", "\\n", "x\\q"]:
            with self.assertRaises(codex_diag.CodexError) as cm:
                decode_value(raw)
            self.assertEqual(cm.exception.code, codex_diag.E_INVALID_ESCAPE, raw)

if __name__ == '__main__':
    unittest.main()
