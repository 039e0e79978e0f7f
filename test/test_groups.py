"""
Group validation behavioral tests (cardinality constraints over options).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import (
    Constraint,
    FaultCode,
    GroupConstraintError,
    MissingRequiredOptionError,
    Occurrences,
    Registry,
)


def _registry(constraint, size=2, **flags):
    registry = Registry(**flags)
    options = [registry.option(name, type=bool) for name in "abc"[:size]]
    registry.group("choice", constraint, *options)
    return registry


class TestGroupConstraints(TestCase):
    """Behavioral tests for each constraint kind."""

    def assertSatisfied(self, constraint, tokens, size=2):
        self.assertTrue(_registry(constraint, size).parse(tokens), tokens)

    def assertViolated(self, constraint, tokens, size=2):
        outcome = _registry(constraint, size).parse(tokens)
        self.assertFalse(outcome, tokens)
        fault, = outcome.faults
        self.assertIsInstance(fault, GroupConstraintError)
        return fault

    def testOne(self):
        self.assertViolated(Constraint.ONE, [])
        self.assertSatisfied(Constraint.ONE, ["-a"])
        self.assertSatisfied(Constraint.ONE, ["-b"])
        self.assertViolated(Constraint.ONE, ["-a", "-b"])

    def testZero(self):
        self.assertSatisfied(Constraint.ZERO, [])
        self.assertViolated(Constraint.ZERO, ["-a"])

    def testZeroOrOne(self):
        self.assertSatisfied(Constraint.ZERO_OR_ONE, [])
        self.assertSatisfied(Constraint.ZERO_OR_ONE, ["-b"])
        self.assertViolated(Constraint.ZERO_OR_ONE, ["-a", "-b"])

    def testOneOrMore(self):
        self.assertViolated(Constraint.ONE_OR_MORE, [])
        self.assertSatisfied(Constraint.ONE_OR_MORE, ["-a"])
        self.assertSatisfied(Constraint.ONE_OR_MORE, ["-a", "-b"])

    def testAll(self):
        self.assertViolated(Constraint.ALL, ["-a"], size=3)
        self.assertSatisfied(Constraint.ALL, ["-a", "-b", "-c"], size=3)

    def testZeroOrAll(self):
        self.assertSatisfied(Constraint.ZERO_OR_ALL, [], size=3)
        self.assertViolated(Constraint.ZERO_OR_ALL, ["-a", "-c"], size=3)
        self.assertSatisfied(Constraint.ZERO_OR_ALL, ["-a", "-b", "-c"], size=3)

    def testDefaultIsNeverChecked(self):
        self.assertSatisfied(Constraint.DEFAULT, [])
        self.assertSatisfied(Constraint.DEFAULT, ["-a", "-b"])

    def testFaultCarriesGroupDetails(self):
        fault = self.assertViolated(Constraint.ONE, ["-a", "-b"])
        self.assertEqual(fault.code, FaultCode.GROUP_CONSTRAINT)
        self.assertEqual(fault.input, "choice")
        self.assertIs(fault.options["constraint"], Constraint.ONE)
        self.assertEqual(fault.options["specified"], 2)
        self.assertIn("exactly one option of group 'choice'", str(fault))
        self.assertIn("got 2 options", str(fault))


class TestGroupValidationOrder(TestCase):
    """Group validation runs after dispatch and before the required check."""

    def testGroupFaultPrecedesMissingRequired(self):
        registry = _registry(Constraint.ONE, deferred=True)
        registry.option("output", occurrences=Occurrences.REQUIRED)
        outcome = registry.parse([])
        self.assertEqual(
            [type(fault) for fault in outcome.faults],
            [GroupConstraintError, MissingRequiredOptionError],
        )

    def testStopFirstStopsAtGroupFault(self):
        registry = _registry(Constraint.ONE)
        registry.option("output", occurrences=Occurrences.REQUIRED)
        outcome = registry.parse([])
        self.assertEqual(len(outcome.faults), 1)
        self.assertIsInstance(outcome.faults[0], GroupConstraintError)

    def testOptionInSeveralGroups(self):
        registry = Registry(deferred=True)
        a = registry.option("a", type=bool)
        b = registry.option("b", type=bool)
        registry.group("one", Constraint.ONE, a, b)
        registry.group("all", Constraint.ALL, a, b)
        outcome = registry.parse(["-a"])
        fault, = outcome.faults
        self.assertEqual(fault.input, "all")


if __name__ == "__main__":
    unittest.main()
