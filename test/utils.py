"""
Tests for the internal helpers.

This module verifies:
- Unset is a falsy, final, process-wide singleton that survives copy and pickle.
- coalesce() only replaces Unset, never other falsy values.
- rename() works both as a function and as a decorator.
- typename() reports the innermost target of destinations and checkers.
"""
import copy
import pickle
import unittest
from fractions import Fraction
from unittest import TestCase

from pareg import InRange, Slot
from pareg.utils import *


class UnsetTest(TestCase):
    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()

    def testSingleton(self) -> None:
        """
        The constructor and the module attribute are the same object.
        """
        self.assertIs(self.unset, Unset)
        self.assertIs(UnsetType(), Unset)

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testNotEqualToNoneOrFalse(self) -> None:
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyAndPicklePreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance(Unset, int | Unset)
        self.assertIsInstance(3, Unset | int)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class CoalesceTest(TestCase):
    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalseyValues(self) -> None:
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class RenameTest(TestCase):
    def testFunctionForm(self) -> None:
        function = rename(lambda: None, "renamed")
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(5, "name")
        with self.assertRaises(TypeError):
            rename(len, 5)
        with self.assertRaises(TypeError):
            rename()


class TypenameTest(TestCase):
    def testTypesAndCallables(self) -> None:
        self.assertEqual(typename(int), "int")
        self.assertEqual(typename(Fraction), "Fraction")

    def testWrappedTargets(self) -> None:
        self.assertEqual(typename(Slot(int)), "int")
        self.assertEqual(typename(InRange(Slot(float), range(3))), "float")


if __name__ == '__main__':
    unittest.main()
