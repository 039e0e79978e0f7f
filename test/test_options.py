"""
Options module behavioral tests (specs, value parsers, storage strategies).

Scope
- Validate Option construction: alias splitting, policy defaults, sanitation.
- Validate Converter and MapParser conversion rules.
- Validate Scalar/Container storage strategies and inserter selection.
- Validate OptionGroup membership rules.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import (
    Arguments,
    Constraint,
    Container,
    Converter,
    Formatting,
    MapParser,
    Misc,
    Occurrences,
    Option,
    OptionGroup,
    Scalar,
)


class TestOption(TestCase):
    """Behavioral tests for Option specifications."""

    def testAliasesSplitOnPipe(self):
        o = Option("debug-level|d")
        self.assertEqual(o.name, "debug-level|d")
        self.assertEqual(o.aliases, ("debug-level", "d"))
        self.assertEqual(o.display, "debug-level")

    def testNameIsStripped(self):
        self.assertEqual(Option("  verbose  ").aliases, ("verbose",))

    def testEmptyAliasRejected(self):
        with self.assertRaises(ValueError):
            Option("a||b")

    def testDuplicateAliasWithinOptionRejected(self):
        with self.assertRaises(ValueError):
            Option("a|a")

    def testAliasWithLeadingDashRejected(self):
        with self.assertRaises(ValueError):
            Option("-x")

    def testAliasWithEqualsRejected(self):
        with self.assertRaises(ValueError):
            Option("a=b")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Option(42)

    def testUnnamedOptionBorrowsAllowedValues(self):
        o = Option("", MapParser({"O0": 0, "O1": 1, "O2": 2}), label="level")
        self.assertEqual(o.aliases, ("O0", "O1", "O2"))
        self.assertEqual(o.display, "level")

    def testUnnamedOptionWithoutAllowedValuesHasNoAliases(self):
        self.assertEqual(Option().aliases, ())

    def testPositionalKeepsNameAsSingleAlias(self):
        o = Option("input file", formatting=Formatting.POSITIONAL)
        self.assertEqual(o.aliases, ("input file",))

    def testLabelDefaultsToArg(self):
        self.assertEqual(Option("x").label, "arg")

    def testEmptyLabelRejected(self):
        with self.assertRaises(ValueError):
            Option("x", label=" ")

    def testDescrDefaultsToNone(self):
        self.assertIsNone(Option("x").descr)

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Option("x", descr=None)

    def testScalarOccurrencesDefaultToOptional(self):
        self.assertIs(Option("x").occurrences, Occurrences.OPTIONAL)

    def testContainerOccurrencesDefaultToZeroOrMore(self):
        self.assertIs(Option("x", storage=Container(list)).occurrences, Occurrences.ZERO_OR_MORE)

    def testExplicitOccurrencesKept(self):
        o = Option("x", storage=Container(list), occurrences=Occurrences.ONE_OR_MORE)
        self.assertIs(o.occurrences, Occurrences.ONE_OR_MORE)
        self.assertTrue(o.required)
        self.assertTrue(o.unbounded)

    def testPolicyTypesValidated(self):
        with self.assertRaises(TypeError):
            Option("x", occurrences="optional")
        with self.assertRaises(TypeError):
            Option("x", arguments="required")
        with self.assertRaises(TypeError):
            Option("x", formatting="prefix")
        with self.assertRaises(TypeError):
            Option("x", flags=1)

    def testConsumeAfterRequiresPositional(self):
        with self.assertRaises(ValueError):
            Option("x", flags=Misc.CONSUME_AFTER)
        o = Option("rest", formatting=Formatting.POSITIONAL, flags=Misc.CONSUME_AFTER)
        self.assertTrue(o.flags & Misc.CONSUME_AFTER)

    def testPrefixPredicate(self):
        self.assertTrue(Option("O", formatting=Formatting.PREFIX).prefix)
        self.assertTrue(Option("I", formatting=Formatting.MAY_PREFIX).prefix)
        self.assertFalse(Option("x", formatting=Formatting.GROUPING).prefix)

    def testFreshOptionState(self):
        o = Option("x", occurrences=Occurrences.REQUIRED)
        self.assertEqual(o.count, 0)
        self.assertIsNone(o.value)
        self.assertTrue(o.occurrence_allowed)
        self.assertTrue(o.occurrence_required)

    def testScalarDefaultValue(self):
        self.assertEqual(Option("x", default="a").value, "a")

    def testContainerDefaultValueIsCopied(self):
        initial = [1, 2]
        o = Option("x", type=int, storage=Container(list), default=initial)
        self.assertEqual(o.value, [1, 2])
        self.assertIsNot(o.value, initial)

    def testParserMustBeCallable(self):
        with self.assertRaises(TypeError):
            Option("x", "not-callable")

    def testTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            Option("x", type="int")

    def testDefaultParserIsConverter(self):
        o = Option("x", type=int)
        self.assertIsInstance(o.parser, Converter)
        self.assertEqual(o.parser("x", "7"), 7)

    def testReprUsesTypename(self):
        self.assertTrue(repr(Option("x")).startswith("option("))
        self.assertTrue(repr(OptionGroup("g")).startswith("option-group("))


class TestConverter(TestCase):
    """Behavioral tests for the default value parser."""

    def testStringPassthrough(self):
        self.assertEqual(Converter(str)("x", " a b "), " a b ")

    def testBoolWords(self):
        parse = Converter(bool)
        for text in ("", "1", "true", "on"):
            self.assertIs(parse("x", text), True)
        for text in ("0", "false", "off"):
            self.assertIs(parse("x", text), False)

    def testBoolRejectsOtherWords(self):
        with self.assertRaises(ValueError):
            Converter(bool)("x", "yes")

    def testIntDetectsBase(self):
        parse = Converter(int)
        self.assertEqual(parse("x", "42"), 42)
        self.assertEqual(parse("x", "0x1F"), 31)
        self.assertEqual(parse("x", "0o17"), 15)
        self.assertEqual(parse("x", "0b101"), 5)
        self.assertEqual(parse("x", "-3"), -3)

    def testIntRejectsGarbage(self):
        with self.assertRaises(ValueError):
            Converter(int)("x", "4x")

    def testOtherTypesAreCalled(self):
        self.assertEqual(Converter(float)("x", "1.5"), 1.5)


class TestMapParser(TestCase):
    """Behavioral tests for the mapping value parser."""

    def testTextIsTheKey(self):
        parse = MapParser({"fast": 1, "slow": 2})
        self.assertEqual(parse("speed", "slow"), 2)

    def testEmptyTextUsesAlias(self):
        parse = MapParser({"O1": 1, "O2": 2})
        self.assertEqual(parse("O2", ""), 2)

    def testUnknownKeyRejected(self):
        with self.assertRaises(ValueError):
            MapParser({"a": 1})("x", "b")

    def testAllowedKeepsDeclarationOrder(self):
        self.assertEqual(MapParser([("b", 1), ("a", 2)]).allowed(), ("b", "a"))

    def testDuplicateKeysRejected(self):
        with self.assertRaises(ValueError):
            MapParser([("a", 1), ("a", 2)])

    def testSharedValuesAllowed(self):
        parse = MapParser([("bart", "bart"), ("el-barto", "bart")])
        self.assertEqual(parse("x", "el-barto"), "bart")


class TestStorage(TestCase):
    """Behavioral tests for Scalar/Container strategies."""

    def testScalarIsStateless(self):
        self.assertIs(Scalar(), Scalar())
        self.assertEqual(Scalar().store("old", "new"), "new")

    def testListAppends(self):
        storage = Container(list)
        value = storage.initial(())
        storage.store(value, 1)
        storage.store(value, 2)
        self.assertEqual(value, [1, 2])

    def testSetAdds(self):
        storage = Container(set)
        value = storage.initial(())
        for item in (1, 2, 1):
            storage.store(value, item)
        self.assertEqual(value, {1, 2})

    def testDictAssignsPairs(self):
        storage = Container(dict)
        value = storage.initial(())
        storage.store(value, ("k", "v"))
        self.assertEqual(value, {"k": "v"})

    def testImmutableContainerNeedsInserter(self):
        with self.assertRaises(TypeError):
            Container(frozenset)

    def testExplicitInserter(self):
        storage = Container(list, lambda container, value: container.insert(0, value))
        value = storage.initial(())
        storage.store(value, 1)
        storage.store(value, 2)
        self.assertEqual(value, [2, 1])

    def testInserterMustBeCallable(self):
        with self.assertRaises(TypeError):
            Container(list, "append")

    def testStorageMustBeAStrategy(self):
        with self.assertRaises(TypeError):
            Option("x", storage=list)


class TestOptionGroup(TestCase):
    """Behavioral tests for OptionGroup specifications."""

    def testMembersKeepOrder(self):
        a, b = Option("a"), Option("b")
        group = OptionGroup("g", Constraint.ONE, a, b)
        self.assertEqual(group.options, [a, b])
        self.assertIs(group.constraint, Constraint.ONE)

    def testAddChains(self):
        a, b = Option("a"), Option("b")
        group = OptionGroup("g").add(a).add(b)
        self.assertEqual(group.options, [a, b])
        self.assertIs(group.constraint, Constraint.DEFAULT)

    def testDuplicateMemberRejected(self):
        a = Option("a")
        with self.assertRaises(ValueError):
            OptionGroup("g", Constraint.ALL, a, a)

    def testNonOptionMemberRejected(self):
        with self.assertRaises(TypeError):
            OptionGroup("g").add("a")

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            OptionGroup(" ")

    def testConstraintTypeValidated(self):
        with self.assertRaises(TypeError):
            OptionGroup("g", "one")

    def testFreshGroupSpecifiedIsZero(self):
        group = OptionGroup("g", Constraint.ZERO_OR_ONE, Option("a"), Option("b"))
        self.assertEqual(group.specified, 0)
        self.assertTrue(group.satisfied)
        self.assertFalse(OptionGroup("h", Constraint.ONE, Option("c")).satisfied)

    def testOptionMayJoinSeveralGroups(self):
        a = Option("a")
        first, second = OptionGroup("first", Constraint.ONE, a), OptionGroup("second", Constraint.ALL, a)
        self.assertEqual(first.options, [a])
        self.assertEqual(second.options, [a])


if __name__ == "__main__":
    unittest.main()
