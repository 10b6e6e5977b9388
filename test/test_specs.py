"""
Specification behavioral tests.

Scope
- Constructors: kinds, implicit defaults, singleton flags, argument validation.
- Immutability: read-only fields, qualifiers return modified copies.
- Qualifier misuse: warned through warnings, recorded in `faults`, no-op
  (an out-of-range default/range pair is still applied).
- Help fragments: name, info, range/choices text, default and envvar sentences.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import unittest
import warnings
from unittest import TestCase

from parsley import *
from parsley.utils import Unset


def qualify(callback):
    """
    run `callback` while recording warnings; return (result, warnings).
    """
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = callback()
    return result, [record.message for record in caught]


class TestConstructors(TestCase):
    """Behavioral tests for spec constructors."""

    def testKinds(self):
        self.assertIs(flag_spec("flag", "f", "A flag.").kind, OptionKind.FLAG)
        self.assertIs(str_spec("name", "n", "A name.").kind, OptionKind.STR)
        self.assertIs(enum_spec("mode", "m", "A mode.", ("a", "b")).kind, OptionKind.ENUM)
        self.assertIs(int_spec("number", "n", "A number.").kind, OptionKind.INT)
        self.assertIs(real_spec("ratio", "r", "A ratio.").kind, OptionKind.REAL)

    def testFlagDefaultsToFalse(self):
        spec = flag_spec("flag", "f", "A flag.")
        self.assertTrue(spec.has_default)
        self.assertIs(spec.default, False)
        self.assertFalse(spec.required)
        self.assertFalse(spec.singleton)

    def testValueKindsStartWithoutDefault(self):
        spec = int_spec("number", "n", "A number.", required=True)
        self.assertFalse(spec.has_default)
        self.assertIs(spec.default, Unset)
        self.assertTrue(spec.required)
        self.assertIsNone(spec.range)
        self.assertIsNone(spec.envvar)
        self.assertEqual(spec.faults, ())

    def testPredefinedSingletons(self):
        for spec, longname, shortname in ((help(), "help", "h"), (version(), "version", "V")):
            with self.subTest(longname=longname):
                self.assertEqual(spec.longname, longname)
                self.assertEqual(spec.shortname, shortname)
                self.assertTrue(spec.singleton)
                self.assertIs(spec.kind, OptionKind.FLAG)
        self.assertEqual(help().description, "Show this message and exit.")
        self.assertEqual(version().description, "Show version and exit.")

    def testShortnameNormalization(self):
        self.assertIsNone(str_spec("name", "", "A name.").shortname)
        self.assertIsNone(str_spec("name", None, "A name.").shortname)
        with self.assertRaises(ValueError):
            str_spec("name", "nm", "A name.")

    def testLongnameValidation(self):
        self.assertEqual(str_spec(" name ", "n", "A name.").longname, "name")
        with self.assertRaises(ValueError):
            str_spec("", "n", "A name.")
        with self.assertRaises(TypeError):
            str_spec(1, "n", "A name.")

    def testChoicesValidation(self):
        self.assertEqual(enum_spec("mode", "m", "A mode.", ["a", "b"]).choices, ("a", "b"))
        with self.assertRaises(TypeError):
            enum_spec("mode", "m", "A mode.", "ab")
        with self.assertRaises(TypeError):
            enum_spec("mode", "m", "A mode.", ("a", 1))
        with self.assertRaises(TypeError):
            OptionSpec(OptionKind.STR, "name", choices=("a",))

    def testDescriptionValidation(self):
        with self.assertRaises(TypeError):
            str_spec("name", "n", None)


class TestImmutability(TestCase):
    """Specs never change after construction."""

    def testFieldsAreReadOnly(self):
        spec = str_spec("name", "n", "A name.")
        with self.assertRaises(AttributeError):
            spec.longname = "other"
        with self.assertRaises(AttributeError):
            spec.anything = 1
        with self.assertRaises(AttributeError):
            del spec.longname

    def testQualifiersReturnCopies(self):
        base = int_spec("number", "n", "Number of widgets.")
        small = base.with_range(1, 20).with_default(4)
        large = base.with_range(1, 1000)
        self.assertIsNone(base.range)
        self.assertFalse(base.has_default)
        self.assertEqual(small.range, (1, 20))
        self.assertEqual(small.default, 4)
        self.assertEqual(large.range, (1, 1000))
        self.assertFalse(large.has_default)

    def testCopiesAreIdentity(self):
        spec = str_spec("name", "n", "A name.")
        self.assertIs(copy.copy(spec), spec)
        self.assertIs(copy.deepcopy(spec), spec)

    def testReplace(self):
        spec = str_spec("name", "n", "A name.")
        other = copy.replace(spec, description="Another name.")
        self.assertEqual(other.description, "Another name.")
        self.assertEqual(other.longname, "name")
        self.assertEqual(spec.description, "A name.")

    def testRepr(self):
        spec = int_spec("number", "n", "A number.")
        self.assertTrue(repr(spec).startswith("integer(longname='number', shortname='n'"))


class TestQualifiers(TestCase):
    """Correct qualifier usage."""

    def testRealQualifiersStoreFloats(self):
        spec = real_spec("ratio", "r", "A ratio.").with_range(0, 2).with_default(1)
        self.assertEqual(spec.range, (0.0, 2.0))
        self.assertIsInstance(spec.default, float)
        self.assertEqual(spec.default, 1.0)

    def testEnumDefault(self):
        spec = enum_spec("mode", "m", "A mode.", ("aaa", "bbb")).with_default("bbb")
        self.assertEqual(spec.default, "bbb")
        self.assertEqual(spec.faults, ())

    def testEnvvar(self):
        spec = str_spec("name", "n", "A name.").with_envvar("NAME")
        self.assertEqual(spec.envvar, "NAME")

    def testEmptyEnvvarLeavesSpecUnset(self):
        spec = str_spec("name", "n", "A name.").with_envvar("")
        self.assertIsNone(spec.envvar)
        self.assertEqual(spec.with_envvar("NAME").envvar, "NAME")

    def testEnvvarRejectsNonString(self):
        with self.assertRaises(TypeError):
            str_spec("name", "n", "A name.").with_envvar(None)


class TestQualifierWarnings(TestCase):
    """Qualifier misuse is warned, recorded and ignored."""

    def assertWarned(self, spec, caught, message, code):
        self.assertEqual(len(caught), 1)
        self.assertIsInstance(caught[0], QualifierWarning)
        self.assertEqual(str(caught[0]), message)
        self.assertIs(caught[0].code, code)
        self.assertEqual(len(spec.faults), 1)
        self.assertEqual(str(spec.faults[0]), message)

    def testMismatchedDefault(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_default("4"))
        self.assertWarned(spec, caught, "default string value for the integer option 'number' ignored.",
                          FaultCode.MISMATCHED_QUALIFIER)
        self.assertFalse(spec.has_default)

    def testFlagRejectsDefault(self):
        spec, caught = qualify(lambda: flag_spec("flag", "f", "A flag.").with_default(True))
        self.assertWarned(spec, caught, "default bool value for the flag option 'flag' ignored.",
                          FaultCode.MISMATCHED_QUALIFIER)
        self.assertIs(spec.default, False)

    def testIntRejectsBoolDefault(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_default(True))
        self.assertEqual(len(caught), 1)
        self.assertFalse(spec.has_default)

    def testSecondaryDefault(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_default(1).with_default(2))
        self.assertWarned(spec, caught, "secondary default value for the integer option 'number' ignored.",
                          FaultCode.SECONDARY_QUALIFIER)
        self.assertEqual(spec.default, 1)

    def testDisallowedEnumDefault(self):
        spec, caught = qualify(lambda: enum_spec("mode", "m", "A mode.", ("aaa", "bbb")).with_default("zzz"))
        self.assertWarned(spec, caught, "the default value for the enumeration option 'mode' is not an allowed value.",
                          FaultCode.DISALLOWED_DEFAULT)
        self.assertFalse(spec.has_default)

    def testOutOfRangeDefaultIsStillSet(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_range(1, 20).with_default(99))
        self.assertWarned(spec, caught, "the default value for the integer option 'number' is out of range.",
                          FaultCode.OUT_OF_RANGE_DEFAULT)
        self.assertEqual(spec.default, 99)

    def testRangeAfterOutOfRangeDefaultIsStillSet(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_default(99).with_range(1, 20))
        self.assertWarned(spec, caught, "the default value for the integer option 'number' is out of range.",
                          FaultCode.OUT_OF_RANGE_DEFAULT)
        self.assertEqual(spec.range, (1, 20))

    def testMismatchedRange(self):
        spec, caught = qualify(lambda: str_spec("name", "n", "A name.").with_range(1, 2))
        self.assertWarned(spec, caught, "integer range constraint for the string option 'name' ignored.",
                          FaultCode.MISMATCHED_QUALIFIER)
        self.assertIsNone(spec.range)

    def testIntRejectsRealRange(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_range(0.5, 2))
        self.assertWarned(spec, caught, "real range constraint for the integer option 'number' ignored.",
                          FaultCode.MISMATCHED_QUALIFIER)

    def testSecondaryRange(self):
        spec, caught = qualify(lambda: int_spec("number", "n", "A number.").with_range(1, 2).with_range(3, 4))
        self.assertWarned(spec, caught, "secondary range constraint for the integer option 'number' ignored.",
                          FaultCode.SECONDARY_QUALIFIER)
        self.assertEqual(spec.range, (1, 2))

    def testSecondaryEnvvar(self):
        spec, caught = qualify(lambda: flag_spec("flag", "f", "A flag.").with_envvar("ONE").with_envvar("TWO"))
        self.assertWarned(spec, caught, "secondary environment variable for the flag option 'flag' ignored.",
                          FaultCode.SECONDARY_QUALIFIER)
        self.assertEqual(spec.envvar, "ONE")

    def testWarningsAccumulate(self):
        spec, caught = qualify(
            lambda: str_spec("name", "n", "A name.").with_range(1, 2).with_default(3).with_default("x")
        )
        self.assertEqual(len(caught), 2)
        self.assertEqual(len(spec.faults), 2)
        self.assertEqual(spec.default, "x")

    def testWarningsCanBeEscalated(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", QualifierWarning)
            with self.assertRaises(QualifierWarning):
                str_spec("name", "n", "A name.").with_range(1, 2)


class TestFragments(TestCase):
    """Help and diagnostic text derived from a spec."""

    def testName(self):
        self.assertEqual(int_spec("number", "n", "").name, "-n, --number")
        self.assertEqual(int_spec("number", None, "").name, "--number")

    def testInfo(self):
        self.assertEqual(enum_spec("mode", "m", "", ("a",)).info, "the enumeration option 'mode'")

    def testRangeText(self):
        self.assertEqual(int_spec("number", "n", "").with_range(1, 20).range_text, "1 to 20")
        self.assertEqual(real_spec("ratio", "r", "").with_range(0.5, 2).range_text, "0.5 to 2.0")
        self.assertEqual(int_spec("number", "n", "").range_text, "")

    def testChoicesText(self):
        self.assertEqual(enum_spec("mode", "m", "", ("aaa", "bbb", "ccc")).choices_text, "(aaa, bbb, ccc)")
        self.assertEqual(str_spec("name", "n", "").choices_text, "(nil)")

    def testHelpConstraint(self):
        self.assertEqual(enum_spec("mode", "m", "", ("a", "b")).help_constraint, "Allowed values: (a, b). ")
        self.assertEqual(int_spec("number", "n", "").with_range(1, 20).help_constraint, "Range: 1 to 20. ")
        self.assertEqual(int_spec("number", "n", "").help_constraint, "")
        self.assertEqual(str_spec("name", "n", "").help_constraint, "")

    def testHelpDefault(self):
        self.assertEqual(str_spec("name", "n", "").with_default("x").help_default, "Default value: 'x'. ")
        self.assertEqual(int_spec("number", "n", "").with_default(4).help_default, "Default value: 4. ")
        self.assertEqual(real_spec("ratio", "r", "").with_default(31.6227).help_default, "Default value: 31.6227. ")
        self.assertEqual(real_spec("ratio", "r", "").with_default(2).help_default, "Default value: 2.0. ")
        self.assertEqual(flag_spec("flag", "f", "").help_default, "Default value: n/a. ")
        self.assertEqual(str_spec("name", "n", "").help_default, "")

    def testHelpEnvvar(self):
        spec = str_spec("name", "n", "").with_envvar("NAME")
        self.assertEqual(spec.help_envvar, "Use the NAME environment variable to provide a default value. ")
        self.assertEqual(spec.with_default("x").help_envvar,
                         "Use the NAME environment variable to override the default value. ")
        self.assertEqual(str_spec("name", "n", "").help_envvar, "")


if __name__ == "__main__":
    unittest.main()
