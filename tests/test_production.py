import unittest

from ddllang.errors import MalformedGrammarError
from ddllang.expr.model import BoolVal, Distinct, Eq, Num, OpKind, Select, conj, nary, symbol
from ddllang.grammar.bnf import ConstantBound, Interval, Production, ProductionRef, SymbolicBound
from ddllang.lowering.index_vars import IndexVarAllocator, default_allocator, index_var, reset_index_vars
from ddllang.lowering.production import _ProductionLowerer, lower_production

B = symbol("B")
HEADER_L1 = "def L1 = \n  block\n    let len = Len\n"


def byte(i):
    return Select(B, Num(i))


def constant(n):
    return ConstantBound(n)


def symbolic(expr):
    return SymbolicBound(expr)


class HeaderTests(unittest.TestCase):
    def setUp(self):
        self.allocator = IndexVarAllocator("ii")

    def test_entry_production_is_main(self):
        production = Production.create(0, [[Interval(constant(0), constant(3))]])
        self.assertEqual(
            lower_production(production, self.allocator),
            "def Main = \n  block\n    let len = Len\n    \n\n",
        )

    def test_other_productions_are_named_by_id(self):
        production = Production.create(17, [[ProductionRef(2)]])
        self.assertTrue(lower_production(production, self.allocator).startswith("def L17 = \n"))

    def test_constant_intervals_introduce_no_variables(self):
        production = Production.create(1, [[Interval(constant(0), constant(1)), ProductionRef(2),
                                            Interval(constant(2), constant(5))]])
        text = lower_production(production, self.allocator)
        self.assertEqual(text, HEADER_L1 + "    { L2; }\n\n\n")
        self.assertEqual(text.count("let "), 1)


class AlternationTests(unittest.TestCase):
    def setUp(self):
        self.allocator = IndexVarAllocator("ii")

    def test_alternatives_are_joined_and_empty_conjunctions_omitted(self):
        production = Production.create(1, [
            [ProductionRef(2), ProductionRef(3)],
            [Interval(constant(0), constant(0))],
            [ProductionRef(4)],
        ])
        self.assertEqual(
            lower_production(production, self.allocator),
            HEADER_L1 + "    { L2; L3; } <| { L4; }\n\n\n",
        )

    def test_no_alternatives_gives_empty_alternation_line(self):
        production = Production.create(1)
        self.assertEqual(lower_production(production, self.allocator), HEADER_L1 + "    \n\n\n")

    def test_reference_to_entry_keeps_numeric_name(self):
        production = Production.create(1, [[ProductionRef(0)]])
        self.assertIn("{ L0; }", lower_production(production, self.allocator))


class BoundTests(unittest.TestCase):
    def setUp(self):
        self.allocator = IndexVarAllocator("ii")
        self.start = nary(OpKind.BADD, byte(0), Num(1))
        self.end = nary(OpKind.BADD, self.start, byte(1))

    def test_symbolic_from_binds_one_variable_and_guards_use_it(self):
        guard = nary(OpKind.ULT, self.start, Num(16))
        production = Production.create(
            1, [[Interval(symbolic(self.start), constant(7)), ProductionRef(2)]], [guard])
        self.assertEqual(
            lower_production(production, self.allocator),
            HEADER_L1
            + "    let ii0 = ((Select 0) + 0x0000000000000001)\n"
            + "    { L2; }\n"
            + "\n    ((ii0 < 0x0000000000000010)) is true"
            + "\n\n",
        )

    def test_symbolic_to_binds_one_variable(self):
        production = Production.create(1, [[Interval(constant(0), symbolic(byte(3)))]],
                                       [Eq(byte(3), Num(9))])
        text = lower_production(production, self.allocator)
        self.assertIn("    let ii0 = (Select 3)\n", text)
        self.assertIn("(ii0 == 0x0000000000000009) is true", text)
        self.assertEqual(text.count("let ii"), 1)

    def test_both_symbolic_bind_from_then_to(self):
        guard = Distinct(self.end, self.start)
        production = Production.create(
            1, [[Interval(symbolic(self.start), symbolic(self.end))]], [guard])
        lowerer = _ProductionLowerer(production, self.allocator)
        text = lowerer.lower()
        self.assertEqual(
            text,
            HEADER_L1
            + "    let ii0 = ((Select 0) + 0x0000000000000001)\n"
            + "    let ii1 = (((Select 0) + 0x0000000000000001) + (Select 1))\n"
            + "    \n"
            + "\n    (ii1 != ii0) is true"
            + "\n\n",
        )
        self.assertEqual(lowerer.substitution, [(self.start, symbol("ii0")), (self.end, symbol("ii1"))])

    def test_variables_accumulate_across_alternatives(self):
        production = Production.create(1, [
            [Interval(symbolic(byte(0)), constant(4))],
            [Interval(constant(0), symbolic(byte(1)))],
        ], [Eq(byte(1), byte(0))])
        text = lower_production(production, self.allocator)
        self.assertIn("    let ii0 = (Select 0)\n    let ii1 = (Select 1)\n", text)
        self.assertIn("(ii1 == ii0) is true", text)

    def test_unset_bound_is_fatal(self):
        for interval in (Interval(None, constant(1)), Interval(constant(0), None)):
            with self.subTest(interval=interval):
                production = Production.create(1, [[interval]])
                with self.assertRaises(MalformedGrammarError):
                    lower_production(production, self.allocator)

    def test_unknown_bound_is_fatal(self):
        production = Production.create(1, [[Interval(3, constant(1))]])
        with self.assertRaises(MalformedGrammarError):
            lower_production(production, self.allocator)

    def test_unknown_item_is_fatal(self):
        production = Production.create(1, [["L2"]])
        with self.assertRaises(MalformedGrammarError):
            lower_production(production, self.allocator)


class GuardTests(unittest.TestCase):
    def setUp(self):
        self.allocator = IndexVarAllocator("ii")

    def lower(self, *assertions):
        production = Production.create(1, [[ProductionRef(2)]], assertions)
        return lower_production(production, self.allocator)

    def test_true_assertion_emits_no_guard(self):
        self.assertEqual(self.lower(BoolVal(True)), HEADER_L1 + "    { L2; }\n\n\n")

    def test_naming_equality_emits_no_guard(self):
        naming = Eq(byte(0), symbol("name_kind"), naming=True)
        self.assertEqual(self.lower(naming), HEADER_L1 + "    { L2; }\n\n\n")

    def test_conjunctions_are_split_and_ordered(self):
        first = Eq(byte(0), Num(1))
        second = Eq(byte(1), Num(2))
        third = Distinct(byte(2), Num(3))
        text = self.lower(conj(first, BoolVal(True), conj(second, Eq(byte(5), symbol("name_x"), naming=True))),
                          third)
        self.assertEqual(
            text,
            HEADER_L1 + "    { L2; }\n"
            + "\n    ((Select 0) == 0x0000000000000001) is true"
            + "\n    ((Select 1) == 0x0000000000000002) is true"
            + "\n    ((Select 2) != 0x0000000000000003) is true"
            + "\n\n",
        )

    def test_disjunction_is_one_guard(self):
        disjunction = nary(OpKind.OR, Eq(byte(0), Num(1)), Eq(byte(0), Num(2)))
        text = self.lower(disjunction)
        self.assertIn(
            "(((Select 0) == 0x0000000000000001 || (Select 0) == 0x0000000000000002)) is true", text)


class AllocatorTests(unittest.TestCase):
    def test_counter_is_shared_between_productions(self):
        allocator = IndexVarAllocator("ii")
        first = Production.create(1, [[Interval(symbolic(byte(0)), symbolic(byte(1)))]])
        second = Production.create(2, [[Interval(symbolic(byte(0)), constant(3))]])
        lower_production(first, allocator)
        text = lower_production(second, allocator)
        self.assertIn("let ii2 = (Select 0)", text)

    def test_process_wide_allocator_restarts_only_on_reset(self):
        allocator = reset_index_vars("run_")
        self.assertIs(default_allocator(), allocator)
        self.assertEqual(index_var(), symbol("run_0"))
        self.assertEqual(index_var(), symbol("run_1"))
        reset_index_vars("run_")
        self.assertEqual(index_var(), symbol("run_0"))

    def test_prefix_is_configurable(self):
        allocator = IndexVarAllocator("idx_", start=5)
        self.assertEqual(allocator.allocate(), symbol("idx_5"))
        self.assertEqual(allocator.allocate(), symbol("idx_6"))


if __name__ == "__main__":
    unittest.main()
