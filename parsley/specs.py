r"""
Parsley option specifications.

Overview
- OptionKind: closed set of option kinds (flag, string, enumeration, integer, real).
- OptionSpec: immutable description of one command-line option.
- Constructors: flag_spec, str_spec, enum_spec, int_spec, real_spec, plus the
  predefined singleton flags help() and version().

Immutability and qualifiers
- Core fields (kind, longname, shortname, description, required) are fixed at
  construction and exposed through read-only properties.
- Qualifiers (with_default, with_range, with_envvar) never mutate the receiver:
  each returns a modified copy built through the __replace__ protocol, so one
  base spec can be extended into several variants:
      >>> base = int_spec("number", "n", "Number of widgets.")
      >>> small = base.with_range(1, 20).with_default(4)
      >>> large = base.with_range(1, 1000)
- Each qualifier may be attached at most once. Misuse (wrong kind, second
  attempt, disallowed or out-of-range default) is not fatal: a QualifierWarning
  is emitted, recorded in the copy's `faults` tuple, and the call is a no-op
  (an out-of-range default/range pair is still applied, only warned about).

Help fragments
- name, info, range_text, choices_text, help_constraint, help_default and
  help_envvar are pure functions of a spec's state, composed by parsley.helps.

Constructor validation
- Wrong types in constructor arguments are programmer errors and raise
  TypeError/ValueError immediately; only qualifier misuse is downgraded to
  warnings.
"""
import builtins
import copy
import enum
import functools
import operator
import re
from collections.abc import Iterable

from .codec import format_int, format_real, index_of, join
from .faults import FaultCode, QualifierWarning, trigger
from .utils import *


class OptionKind(enum.Enum):
    """
    the closed set of option kinds; `image` is the word used in diagnostics.
    """
    FLAG = "flag"
    STR = "string"
    ENUM = "enumeration"
    INT = "integer"
    REAL = "real"

    @property
    def image(self):
        return self.value


class SpecType(type):
    """
    Metaclass that turns spec classes into introspectable, read-only records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      (see mirror()) backed by a "_{name}" slot.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Derive __typename__ from the class name for messages.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        introspectable = namespace.get("__introspectable__", ())
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
                "__slots__": tuple("_" + name for name in introspectable),
            } | {
                name: mirror(name) for name in introspectable
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - int-spec(longname='number', shortname='n', ...)
            """
            return f"{self.kind.image}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize construction metadata in place.

    - kind: must be an OptionKind.
    - longname: non-empty string after trimming (stored trimmed).
    - shortname: None, "" or a single character; "" is normalized to None.
    - description: string (may be empty; a leading "!" marks pre-formatted text).
    - choices: iterable of strings, only for enumerations (stored as a tuple).
    - envvar: None or string; "" is normalized to None.
    - range: None or a (minimum, maximum) pair.
    - faults: iterable of warnings (stored as a tuple).
    """
    if not isinstance(metadata["kind"], OptionKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be an option kind")

    if not isinstance(longname := metadata["longname"], str):
        raise TypeError(f"{cls.__typename__} 'longname' must be a string")
    elif not (longname := longname.strip()):
        raise ValueError(f"{cls.__typename__} 'longname' cannot be empty")
    metadata["longname"] = longname

    if not isinstance(shortname := metadata["shortname"], str | None):
        raise TypeError(f"{cls.__typename__} 'shortname' must be a string")
    elif shortname is not None and len(shortname) > 1:
        raise ValueError(f"{cls.__typename__} 'shortname' must be a single character")
    metadata["shortname"] = shortname or None

    if not isinstance(metadata["description"], str):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    choices = tuple(choices)
    if not all(isinstance(choice, str) for choice in choices):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    if choices and metadata["kind"] is not OptionKind.ENUM:
        raise TypeError(f"{cls.__typename__} 'choices' are only allowed for enumerations")
    metadata["choices"] = choices

    if not isinstance(envvar := metadata["envvar"], str | None):
        raise TypeError(f"{cls.__typename__} 'envvar' must be a string")
    metadata["envvar"] = envvar or None

    if metadata["range"] is not None:
        minimum, maximum = metadata["range"]
        metadata["range"] = (minimum, maximum)

    metadata["faults"] = tuple(metadata["faults"])
    metadata["required"] = bool(metadata["required"])
    metadata["singleton"] = bool(metadata["singleton"])


def _imageof(value, /):
    # describes the kind of a literal handed to a qualifier
    if isinstance(value, str):
        return OptionKind.STR.image
    if isinstance(value, int) and not isinstance(value, bool):
        return OptionKind.INT.image
    if isinstance(value, float):
        return OptionKind.REAL.image
    return type(value).__name__


def _integral(value, /):
    return isinstance(value, int) and not isinstance(value, bool)


def _numeric(value, /):
    return _integral(value) or isinstance(value, float)


class OptionSpec(metaclass=SpecType):
    """
    Immutable description of one command-line option.

    Fields (read-only properties)
    - kind: OptionKind
    - longname: str, unique within a spec list (matched as --longname)
    - shortname: str | None, single character (matched as -x)
    - description: str, help text; a leading "!" marks pre-formatted text
    - required: bool, a value must be resolved (flags are never required)
    - singleton: bool, presence short-circuits resolution (help/version)
    - choices: tuple[str, ...], allowed literals (enumerations only)
    - range: (minimum, maximum) | None, closed interval (numbers only)
    - envvar: str | None, environment variable able to supply a value
    - default: literal of the matching kind, or Unset
    - faults: tuple of QualifierWarning collected while qualifying this spec
    """

    __introspectable__ = (
        "kind",
        "longname",
        "shortname",
        "description",
        "required",
        "singleton",
        "choices",
        "range",
        "envvar",
        "default",
        "faults",
    )
    __displayable__ = (
        "longname",
        "shortname",
        "description",
        "required",
        "singleton",
        "choices",
        "range",
        "envvar",
        "default",
    )

    def __new__(
            cls,
            kind,
            longname,
            shortname=None,
            description="",
            required=False,
            *,
            singleton=False,
            choices=(),
            range=None,
            envvar=None,
            default=Unset,
            faults=()
    ):
        metadata = {
            "kind": kind,
            "longname": longname,
            "shortname": shortname,
            "description": description,
            "required": required,
            "singleton": singleton,
            "choices": choices,
            "range": range,
            "envvar": envvar,
            "default": default,
            "faults": faults,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            builtins.object.__setattr__(self, "_" + name, object)
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __replace__(self, *unused, **changes):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**{name: getattr(self, "_" + name) for name in type(self).__introspectable__} | changes)

    # --- state helpers -------------------------------------------------------

    @property
    def has_default(self):
        return self._default is not Unset

    def _within(self, value, range, /):
        minimum, maximum = range
        return minimum <= value <= maximum

    def _warn(self, message, code, title, /, **changes):
        """
        emit a qualifier warning and return a copy recording it (plus `changes`).
        """
        fault = QualifierWarning(
            message,
            code=code,
            title=title,
            hint="check the qualifiers chained on %s" % self.info,
            spec=self,
        )
        # __trigger__, trigger, _warn, the qualifier, then its caller
        trigger(fault, stacklevel=5)
        return copy.replace(self, faults=self._faults + (fault,), **changes)

    # --- qualifiers ----------------------------------------------------------

    def with_default(self, value, /):
        """
        return a copy carrying `value` as default.

        accepted literals: str for strings and enumerations (which must be one of
        the choices), int for integers, int or float for reals (stored as float).
        flags already default to False and accept nothing.
        """
        match self._kind:
            case OptionKind.STR | OptionKind.ENUM:
                matches = isinstance(value, str)
            case OptionKind.INT:
                matches = _integral(value)
            case OptionKind.REAL:
                matches = _numeric(value)
            case _:
                matches = False

        if not matches:
            return self._warn(
                "default %s value for %s ignored." % (_imageof(value), self.info),
                FaultCode.MISMATCHED_QUALIFIER,
                "mismatched default",
            )
        if self.has_default:
            return self._warn(
                "secondary default value for %s ignored." % self.info,
                FaultCode.SECONDARY_QUALIFIER,
                "secondary default",
            )
        if self._kind is OptionKind.ENUM and index_of(self._choices, value) == -1:
            return self._warn(
                "the default value for %s is not an allowed value." % self.info,
                FaultCode.DISALLOWED_DEFAULT,
                "disallowed default",
            )

        if self._kind is OptionKind.REAL:
            value = float(value)
        if self._range is not None and not self._within(value, self._range):
            return self._warn(
                "the default value for %s is out of range." % self.info,
                FaultCode.OUT_OF_RANGE_DEFAULT,
                "out of range default",
                default=value,
            )
        return copy.replace(self, default=value)

    def with_range(self, minimum, maximum, /):
        """
        return a copy constrained to the closed interval [minimum, maximum].

        integers take int bounds, reals take int or float bounds (stored as float).
        """
        match self._kind:
            case OptionKind.INT:
                matches = _integral(minimum) and _integral(maximum)
            case OptionKind.REAL:
                matches = _numeric(minimum) and _numeric(maximum)
            case _:
                matches = False

        if not matches:
            image = OptionKind.INT.image if _integral(minimum) and _integral(maximum) else OptionKind.REAL.image
            return self._warn(
                "%s range constraint for %s ignored." % (image, self.info),
                FaultCode.MISMATCHED_QUALIFIER,
                "mismatched range",
            )
        if self._range is not None:
            return self._warn(
                "secondary range constraint for %s ignored." % self.info,
                FaultCode.SECONDARY_QUALIFIER,
                "secondary range",
            )

        if self._kind is OptionKind.REAL:
            minimum, maximum = float(minimum), float(maximum)
        if self.has_default and not self._within(self._default, (minimum, maximum)):
            return self._warn(
                "the default value for %s is out of range." % self.info,
                FaultCode.OUT_OF_RANGE_DEFAULT,
                "out of range default",
                range=(minimum, maximum),
            )
        return copy.replace(self, range=(minimum, maximum))

    def with_envvar(self, name, /):
        """
        return a copy whose value may come from the environment variable `name`.

        an empty name leaves the spec without environment variable.
        """
        if not isinstance(name, str):
            raise TypeError("with_envvar() argument must be a string")
        if self._envvar is not None:
            return self._warn(
                "secondary environment variable for %s ignored." % self.info,
                FaultCode.SECONDARY_QUALIFIER,
                "secondary environment variable",
            )
        return copy.replace(self, envvar=name)

    # --- help fragments ------------------------------------------------------

    @property
    def name(self):
        """
        display name used in help and error messages: "-x, --long" or "--long".
        """
        if self._shortname:
            return "-%s, --%s" % (self._shortname, self._longname)
        return "--" + self._longname

    @property
    def info(self):
        return "the %s option '%s'" % (self._kind.image, self._longname)

    def format(self, value, /):
        """
        render a numeric literal of this spec's kind.
        """
        if self._kind is OptionKind.REAL:
            return format_real(value)
        return format_int(value)

    @property
    def range_text(self):
        if self._kind not in (OptionKind.INT, OptionKind.REAL) or self._range is None:
            return ""
        return "%s to %s" % tuple(map(self.format, self._range))

    @property
    def choices_text(self):
        if self._kind is not OptionKind.ENUM:
            return "(nil)"
        return "(" + join(self._choices, ", ") + ")"

    @property
    def help_constraint(self):
        match self._kind:
            case OptionKind.ENUM:
                return "Allowed values: %s. " % self.choices_text
            case OptionKind.INT | OptionKind.REAL if self._range is not None:
                return "Range: %s. " % self.range_text
            case _:
                return ""

    @property
    def help_default(self):
        if not self.has_default:
            return ""
        match self._kind:
            case OptionKind.FLAG:
                value = "n/a"
            case OptionKind.STR | OptionKind.ENUM:
                value = "'%s'" % self._default
            case _:
                value = self.format(self._default)
        return "Default value: %s. " % value

    @property
    def help_envvar(self):
        if self._envvar is None:
            return ""
        purpose = "override the default value" if self.has_default else "provide a default value"
        return "Use the %s environment variable to %s. " % (self._envvar, purpose)


def flag_spec(longname, shortname, description, singleton=False):
    """
    build a flag: implicitly optional, implicitly defaults to False.
    """
    return OptionSpec(OptionKind.FLAG, longname, shortname, description, singleton=singleton, default=False)


def str_spec(longname, shortname, description, required=False):
    return OptionSpec(OptionKind.STR, longname, shortname, description, required)


def enum_spec(longname, shortname, description, choices, required=False):
    """
    build an enumeration; values are matched case-sensitively against `choices`.
    """
    return OptionSpec(OptionKind.ENUM, longname, shortname, description, required, choices=choices)


def int_spec(longname, shortname, description, required=False):
    return OptionSpec(OptionKind.INT, longname, shortname, description, required)


def real_spec(longname, shortname, description, required=False):
    return OptionSpec(OptionKind.REAL, longname, shortname, description, required)


def help():
    """
    predefined singleton flag: -h, --help.
    """
    return flag_spec("help", "h", "Show this message and exit.", singleton=True)


def version():
    """
    predefined singleton flag: -V, --version.
    """
    return flag_spec("version", "V", "Show version and exit.", singleton=True)


__all__ = (
    # Types
    "OptionKind",
    "OptionSpec",

    # Constructors
    "flag_spec",
    "str_spec",
    "enum_spec",
    "int_spec",
    "real_spec",
    "help",
    "version",
)

# Not part of the public API.
del SpecType
