"""
Utils module behavioral tests (sentinel, coalesce, mirror, ordinals).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard.utils import Unset, UnsetType, coalesce, mirror, ordinal, pluralize, rename


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA: F-811
                pass

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)


class TestHelpers(TestCase):
    """Behavioral tests for rename/mirror/ordinal/pluralize."""

    def testRenameBothForms(self):
        def f():
            pass

        self.assertEqual(rename(f, "g").__name__, "g")

        @rename("h")
        def f():
            pass

        self.assertEqual(f.__qualname__, "h")

    def testMirrorReturnsCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, [2]]

        holder = Holder()
        holder.items[1].append(3)
        self.assertEqual(holder._items, [1, [2]])
        with self.assertRaises(AttributeError):
            holder.items = []

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(113), "113th")

    def testPluralize(self):
        self.assertEqual(pluralize("option"), "options")
        self.assertEqual(pluralize("alias"), "aliases")
        self.assertEqual(pluralize("response file"), "response files")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("Key"), "Keys")


if __name__ == "__main__":
    unittest.main()
