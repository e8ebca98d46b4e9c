import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

import ddlgen
from ddllang.argument_parser.parser import DDLGenArgs, parse_args

GRAMMAR = {
    "declarations": "(declare-const B (Array (_ BitVec 64) (_ BitVec 8)))",
    "productions": [
        {"id": 0, "alternatives": [[{"production": 1}]]},
        {"id": 1, "alternatives": [[{"from": "(select B #x0000000000000000)", "to": 3}]],
         "assertions": ["(bvugt (select B #x0000000000000000) #x00)"]},
    ],
}


class ArgumentTests(unittest.TestCase):
    def test_defaults(self):
        args = parse_args(["grammar.json"])
        self.assertEqual(args, DDLGenArgs(grammar="grammar.json"))
        self.assertEqual(args.output, "-")

    def test_all_options(self):
        args = parse_args(["g.json", "-o", "out.ddl", "--echo", "--debug",
                           "--index-prefix", "v", "--naming-prefix", "fld_"])
        self.assertEqual(args.to_dict(), {
            "grammar": "g.json", "output": "out.ddl", "echo": True, "debug": True,
            "index_prefix": "v", "naming_prefix": "fld_",
        })


class MainTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.grammar = Path(self.tmp.name) / "grammar.json"
        self.grammar.write_text(json.dumps(GRAMMAR), encoding="utf-8")
        self.output = Path(self.tmp.name) / "out.ddl"

    def test_writes_the_document(self):
        status = ddlgen.main([str(self.grammar), "-o", str(self.output)])
        self.assertEqual(status, 0)
        text = self.output.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("def Select (N : uint 64) =\n"))
        self.assertIn("    let ii0 = (Select 0)\n", text)
        self.assertIn("((ii0 > 0x0000000000000000)) is true", text)

    def test_each_run_restarts_the_counter(self):
        ddlgen.main([str(self.grammar), "-o", str(self.output)])
        first = self.output.read_text(encoding="utf-8")
        ddlgen.main([str(self.grammar), "-o", str(self.output)])
        self.assertEqual(self.output.read_text(encoding="utf-8"), first)

    def test_echo_and_index_prefix(self):
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            status = ddlgen.main([str(self.grammar), "--echo", "--index-prefix", "idx"])
        self.assertEqual(status, 0)
        self.assertIn("    let idx0 = (Select 0)\n", buffer.getvalue())
        self.assertFalse(self.output.exists())

    def test_unopenable_destination_is_not_fatal(self):
        target = Path(self.tmp.name) / "missing" / "out.ddl"
        self.assertEqual(ddlgen.main([str(self.grammar), "-o", str(target)]), 0)
        self.assertFalse(target.exists())

    def test_malformed_grammar_aborts_without_output(self):
        broken = dict(GRAMMAR)
        broken["productions"] = [{"id": 1, "alternatives": [[{"from": None, "to": 3}]]}]
        self.grammar.write_text(json.dumps(broken), encoding="utf-8")
        self.assertEqual(ddlgen.main([str(self.grammar), "-o", str(self.output)]), 1)
        self.assertFalse(self.output.exists())

    def test_unreadable_grammar_aborts(self):
        missing = Path(self.tmp.name) / "absent.json"
        self.assertEqual(ddlgen.main([str(missing), "-o", str(self.output)]), 1)


if __name__ == "__main__":
    unittest.main()
