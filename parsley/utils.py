"""
Parsley utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the specification, value and parser layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Used for option defaults, where None is never a legal default but “no default”
    must still be told apart from falsy literals such as "", 0 or 0.0.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated accessors for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as a
    frozen snapshot (tuple / MappingProxyType / frozenset for containers).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(0, "fallback")
    0
"""
import builtins
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type of Unset: "no value was provided".

    - bool(Unset) is False, yet Unset is neither None nor 0.
    - repr(Unset) is "Unset".
    - UnsetType() always returns the one instance, and copying or pickling
      keeps that identity.
    - The instance may stand for its type in unions: isinstance(x, str | Unset).
    - Sealed, subclassing raises TypeError.
    """
    __instance = None

    def __new__(cls):
        if cls.__instance is None:
            cls.__instance = super().__new__(cls)
        return cls.__instance

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, 0.0 or "" are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce("", "fallback")     -> ""
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Give a callable a stable __name__/__qualname__.

    - rename(callable, name) renames in place and returns the callable.
    - rename(name) returns a decorator doing the same.
    """
    if len(parameters) not in (1, 2):
        raise TypeError("rename() takes 1 or 2 arguments (%d given)" % len(parameters))
    *target, name = parameters
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")

    def apply(callable):
        if not builtins.callable(callable):
            raise TypeError("rename() target must be callable")
        callable.__name__ = callable.__qualname__ = name
        return callable

    return apply(*target) if target else apply


def _freeze(object):
    """
    Shallow-freeze a container for public exposure.

    - Sequence (non-string) → tuple
    - Mapping               → MappingProxyType
    - Set                   → frozenset
    - anything else         → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" from the instance and returns a frozen
    snapshot for container types. There is no setter: assigning the public name
    raises AttributeError.

    Example
    - Given self._choices, declare choices = mirror("choices") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
