"""
Parsley resolved values.

- OptionValue: the immutable per-option result of a resolution.
- OptionValues: read-only, name-keyed view over OptionValue records; unknown
  names yield an empty OptionValue() instead of raising.
- Resolution: the outcome of one resolution call (success, values, leftover
  parameters, first error).
"""
from collections import namedtuple
from collections.abc import Mapping
from types import MappingProxyType


class OptionValue(namedtuple("OptionValue", ("defined", "flag", "str", "ival", "real"), defaults=(False, False, "", 0, 0.0))):
    """
    resolved value of one option.

    - defined: a value was resolved (explicitly, from the environment or by default).
      flags are always defined.
    - flag: flag state.
    - str: string value, or the chosen literal of an enumeration.
    - ival: integer value, or the zero-based index of an enumeration literal
      (-1 while unresolved).
    - real: real value.
    """
    __slots__ = ()


class OptionValues(Mapping):
    """
    read-only mapping from long option name to OptionValue.

    lookups of undeclared names succeed and return OptionValue(), so callers may
    probe conventional names ("help", "version") without guarding.
    """
    __slots__ = ("_values",)

    def __init__(self, values=(), /):
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, name, /):
        return self._values.get(name, OptionValue())

    def __contains__(self, name, /):
        return name in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, dict(self._values))

    def __rich_repr__(self):
        yield from self._values.items()


class Resolution(namedtuple("Resolution", ("success", "options", "parameters", "error"))):
    """
    outcome of a resolution.

    - success: bool.
    - options: OptionValues (empty on failure).
    - parameters: tuple of positional parameters, in order.
    - error: the first ParsleyException encountered, or None.
    """
    __slots__ = ()

    @property
    def message(self):
        return "" if self.error is None else str(self.error)


__all__ = (
    "OptionValue",
    "OptionValues",
    "Resolution",
)
