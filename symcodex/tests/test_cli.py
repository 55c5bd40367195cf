import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from symcodex import codex
from symcodex.codex_cli import describe_value, main

SOURCE = "\n".join([
    "arrow →",
    "  .r.double ⇒",
    "@deprecated: use `arrow` instead",
    "oldarrow @= arrow",
    "shapes {",
    "  square □",
    "}",
    "",
])

class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.cache_dir = os.path.join(self.tmp.name, "cache")
        env = patch.dict(os.environ, {"SYMCODEX_CACHE_DIR": self.cache_dir})
        env.start()
        self.addCleanup(env.stop)
        codex.reset_root()
        self.addCleanup(codex.reset_root)
        self.src = self.write("arrows.txt", SOURCE)

    def write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        return path

    def run_cli(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_describe_value(self):
        self.assertEqual(describe_value("⇒"), "⇒ (U+21D2)")
        self.assertEqual(describe_value("\u2600\ufe0f"), "\u2600\ufe0f (U+2600 U+FE0F)")

    def test_compile(self):
        code, out, _ = self.run_cli("compile", self.src)
        self.assertEqual(code, 0)
        self.assertIn("bindings: 3", out)
        self.assertIn(f"source_hash: {codex.compute_source_hash(SOURCE)}", out)

    def test_compile_with_out(self):
        out_path = os.path.join(self.tmp.name, "arrows.json")
        code, out, _ = self.run_cli("compile", self.src, "--out", out_path)
        self.assertEqual(code, 0)
        self.assertIn(f"written: {out_path}", out)
        with open(out_path, encoding='utf-8') as f:
            doc = json.load(f)
        self.assertEqual(doc["source_hash"], codex.compute_source_hash(SOURCE))

    def test_compile_trace(self):
        code, out, _ = self.run_cli("--trace", "compile", self.src)
        self.assertEqual(code, 0)
        self.assertIn("LINES:", out)
        self.assertIn("DECLARATIONS:", out)
        self.assertIn("DeclAlias", out)

    def test_compile_error(self):
        bad = self.write("bad.txt", "a x\n@deprecated: gone\n}\n")
        code, _, err = self.run_cli("compile", bad)
        self.assertEqual(code, 1)
        self.assertIn(f"Error: {bad}:3: ", err)

    def test_compile_error_json_log(self):
        bad = self.write("bad.txt", "a x\n@deprecated: gone\n}\n")
        code, _, err = self.run_cli("--log-level", "debug", "--log-json", "compile", bad)
        self.assertEqual(code, 1)
        entries = [json.loads(line) for line in err.splitlines() if line.startswith("{")]
        failed = [e for e in entries if e["message"] == "Command failed"]
        self.assertEqual(len(failed), 1)
        self.assertEqual(failed[0]["command"], "compile")
        self.assertEqual((failed[0]["source_file"], failed[0]["source_line"]), (bad, 3))

    def test_missing_file(self):
        code, _, err = self.run_cli("compile", os.path.join(self.tmp.name, "nope.txt"))
        self.assertEqual(code, 1)
        self.assertIn("Failed to read", err)

    def test_lookup_in_file(self):
        code, out, _ = self.run_cli("lookup", "arrow.double.r", "--file", self.src)
        self.assertEqual(code, 0)
        self.assertIn("value: ⇒ (U+21D2)", out)

    def test_lookup_in_root(self):
        code, out, _ = self.run_cli("lookup", "sym.dot.center")
        self.assertEqual(code, 0)
        self.assertIn("value: · (U+00B7)", out)
        self.assertIn("deprecated: use `dot.c` instead", out)

    def test_lookup_missing(self):
        code, out, _ = self.run_cli("lookup", "arrow.up", "--file", self.src)
        self.assertEqual(code, 1)
        self.assertIn("No such symbol: arrow.up", out)

    def test_list_module(self):
        code, out, _ = self.run_cli("list", "--file", self.src)
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0], "arrow  (symbol)")
        self.assertEqual(lines[1], "oldarrow  (symbol)  [deprecated: use `arrow` instead]")
        self.assertEqual(lines[2], "shapes  (module)")

    def test_list_symbol(self):
        code, out, _ = self.run_cli("list", "arrow", "--file", self.src)
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), [".  → (U+2192)", ".r.double  ⇒ (U+21D2)"])

    def test_list_missing(self):
        code, out, _ = self.run_cli("list", "shapes.circle", "--file", self.src)
        self.assertEqual(code, 1)
        self.assertIn("No such module or symbol", out)

    def test_check_files(self):
        ambiguous = self.write("amb.txt", "x\n  .a? 1\n  .b? 2\n")
        code, out, _ = self.run_cli("check", self.src, ambiguous)
        self.assertEqual(code, 1)
        self.assertIn(f"{self.src}: ok", out)
        self.assertIn(f"{ambiguous}: ", out)
        self.assertIn("x: request ``", out)

    def test_check_shipped_corpora(self):
        code, out, _ = self.run_cli("check")
        self.assertEqual(code, 0)
        self.assertEqual(out.count(": ok"), len(codex.CORPORA))

    def test_cache_commands(self):
        code, out, _ = self.run_cli("cache", "path")
        self.assertEqual((code, out.strip()), (0, self.cache_dir))

        self.run_cli("lookup", "sym.arrow.r")
        code, out, _ = self.run_cli("cache", "gc", "--keep", "1")
        self.assertEqual(code, 0)
        self.assertIn("Kept 1 entries", out)

        code, out, _ = self.run_cli("cache", "clear")
        self.assertEqual(code, 0)
        self.assertIn("Removed 1 entries", out)

    def test_cache_without_subcommand(self):
        code, _, err = self.run_cli("cache")
        self.assertEqual(code, 1)
        self.assertIn("cache needs a subcommand", err)

    def test_no_command(self):
        code, out, _ = self.run_cli()
        self.assertEqual(code, 0)
        self.assertIn("usage:", out)

if __name__ == '__main__':
    unittest.main()
