"""
Parsley faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain so logs and searches stay predictable.
- ParsleyException / ParsleyWarning: base types that carry a message plus
  read-only options (code, title, hint and context) and know how to render
  themselves with rich.
- trigger(): central entry point to surface a fault (raise errors, warn warnings).
- report(): print any fault to a console (stderr by default).

Taxonomy
- specification errors: name collisions found when the parser is built; they
  poison every later resolution (SpecificationError).
- usage errors: problems in the user's command line (UsageError subclasses).
- programmer warnings: misuse of spec qualifiers and conflicting names
  (ParsleyWarning subclasses), emitted through the warnings module so hosts can
  capture, silence or escalate them with the usual filters.

Integration
- The parser raises usage errors internally and turns them into a failed
  resolution at its public boundary; it never lets them escape process().
- Presentation can be tuned by the host through __styles__, __codes__ and
  __prog__ mappings/strings defined in __main__.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - specification (111xx)
      • SPECIFICATION_ERRORS
    - usage (112xx)
      • MALFORMED_OPTION, UNKNOWN_OPTION, DUPLICATE_OPTION, MISSING_ARGUMENT,
        INVALID_CHOICE, INVALID_LITERAL, OUT_OF_RANGE, REQUIRED_OPTION
    - warnings (121xx)
      • CONFLICTING_OPTIONS, MISMATCHED_QUALIFIER, SECONDARY_QUALIFIER,
        DISALLOWED_DEFAULT, OUT_OF_RANGE_DEFAULT
    """
    # --- specification errors (111xx) ---
    SPECIFICATION_ERRORS        = 11101

    # --- usage errors (112xx) ---
    MALFORMED_OPTION            = 11201
    UNKNOWN_OPTION              = 11202
    DUPLICATE_OPTION            = 11203
    MISSING_ARGUMENT            = 11204
    INVALID_CHOICE              = 11205
    INVALID_LITERAL             = 11206
    OUT_OF_RANGE                = 11207
    REQUIRED_OPTION             = 11208

    # --- warnings (121xx) ---
    CONFLICTING_OPTIONS         = 12101
    MISMATCHED_QUALIFIER        = 12111
    SECONDARY_QUALIFIER         = 12112
    DISALLOWED_DEFAULT          = 12113
    OUT_OF_RANGE_DEFAULT        = 12114

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, kind, /):
    main = __import__("__main__")

    styles = defaultdict(str, {
        # header parts
        "prog-name": "bold #E6E6F0",
        "error-code": "bold #00E5FF",
        "warning-code": "bold #FFB400",
        "error-title": "bold #FF4DA6",
        "warning-title": "bold #FFC2E0",

        # body
        "error-message": "#C8C8D0",
        "warning-message": "#D6D6DE",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    } | getattr(main, "__styles__", {}))

    colorful = fault.options.get("colorful", False)

    def text(fragment, style=""):
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    code = fault.options.get("code")
    title = fault.options.get("title") or kind

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", "parsley"), "prog-name"),
        " | ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", kind + "-code"),
        " | ",
        text(title.title(), kind + "-title"),
        " ]"
    )
    renders = [header, text(fault.message, kind + "-message")]
    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    return Group(*renders)


class _Fault:
    """
    shared shape of parsley errors and warnings.

    - message: str, the one-line diagnostic (also str(fault)).
    - options: read-only mapping with code/title/hint and any context
      (spec, token, value, ...).
    - copy.replace(fault, **options) rebuilds the fault with merged options.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return str(self.message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **(dict(self.options) | overrides))


class ParsleyException(_Fault, Exception):
    """
    base of every error raised by parsley.
    """

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self) -> None:
        raise self


class SpecificationError(ParsleyException): ...
class UsageError(ParsleyException): ...
class MalformedOptionError(UsageError): ...
class UnknownOptionError(UsageError): ...
class DuplicateOptionError(UsageError): ...
class MissingArgumentError(UsageError): ...
class InvalidChoiceError(UsageError): ...
class InvalidLiteralError(UsageError): ...
class OutOfRangeError(UsageError): ...
class RequiredOptionError(UsageError): ...


class ParsleyWarning(_Fault, Warning):
    """
    base of every warning emitted by parsley.
    """

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self) -> None:
        # one frame for __trigger__, one for trigger(), then the emitting site
        warnings.warn(self, stacklevel=self.options.get("stacklevel", 3))


class QualifierWarning(ParsleyWarning): ...
class ConflictingOptionWarning(ParsleyWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault, merging `options` into it first.

    errors are raised; warnings go through warnings.warn (pass stacklevel=...
    to point the warning at the right caller).
    """
    if not (callable(getattr(fault, "__trigger__", None)) and callable(getattr(fault, "__replace__", None))):
        raise TypeError("trigger() argument must be a parsley fault")
    copy.replace(fault, **options).__trigger__()


def report(fault, /, *, file=None, colorful=False):
    """
    print a fault (error or warning) to `file`, stderr by default.
    """
    if not isinstance(fault, ParsleyException | ParsleyWarning):
        raise TypeError("report() argument must be a parsley fault")
    console = Console(file=file or sys.stderr, highlight=False)
    console.print(copy.replace(fault, colorful=colorful), soft_wrap=True)


__all__ = (
    "FaultCode",
    "ParsleyException",
    "SpecificationError",
    "UsageError",
    "MalformedOptionError",
    "UnknownOptionError",
    "DuplicateOptionError",
    "MissingArgumentError",
    "InvalidChoiceError",
    "InvalidLiteralError",
    "OutOfRangeError",
    "RequiredOptionError",
    "ParsleyWarning",
    "QualifierWarning",
    "ConflictingOptionWarning",
    "trigger",
    "report",
)
