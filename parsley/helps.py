"""
Parsley help renderer.

Lays out a spec list as aligned, word-wrapped text:

    Options:
    -n, --number        Number of widgets.
                        Range: 1 to 20. Default value: 4.

Layout rules
- Every entry starts with the display name ("-x, --long" or "--long") padded to
  a fixed description column (GAP); a name too long for the column is followed
  by a single space.
- Descriptions are wrapped word by word: a line is emitted as soon as it
  reaches the configured characters-per-line, and continuation lines start at
  the description column. Words longer than a line are never split.
- A description starting with "!" is pre-formatted: the marker is dropped and
  the text is split on newlines, each line re-indented to the column.
- The extras paragraph follows at the same column: "Required." (only when no
  default exists), then the kind-specific constraint, default and environment
  variable sentences.
- Optionally a blank line separates entries, and a closing paragraph describes
  the "--" end-of-options marker.

Rendering produces a rich Text; styles are applied only when colorful is True
and can be overridden through a __styles__ mapping in __main__.
"""
from collections import defaultdict

from rich.text import Text

from .codec import split
from .specs import OptionKind

GAP = 20
MINIMUM_CPL = 40
DEFAULT_CPL = 92

NOMORE = (
    "The null option indicating no more options. "
    "This is useful if/when the initial parameters \"look like\" options. "
)


def _wrap(name, words, cpl, /):
    """
    word-wrap `words` after `name`; returns (head, body) pairs, one per line.
    """
    lines = []
    head = (name + " ").ljust(GAP)
    body = ""
    for word in words:
        # always add then test, a single word may exceed the line
        body = body + " " + word if body else word
        if len(head) + len(body) >= cpl:
            lines.append((head, body))
            head, body = " " * GAP, ""
    if body:
        lines.append((head, body))
    elif not lines and name:
        lines.append((name, ""))
    return lines


def _literal(name, text, /):
    """
    pre-formatted description: one (head, body) pair per line of `text`.
    """
    lines = []
    head = (name + " ").ljust(GAP)
    for part in split(text, "\n", True):
        lines.append((head, part))
        head = " " * GAP
    return lines


def _extras(spec, /):
    extra = ""
    if spec.required and not spec.has_default:
        # a default makes the option satisfiable without user input
        extra += "Required. "

    match spec.kind:
        case OptionKind.FLAG:
            if spec.envvar:
                extra += ("Use the %s environment variable set to 'Y', 'YES' or '1' "
                          "to set flag on. ") % spec.envvar
        case OptionKind.STR:
            extra += spec.help_default
            extra += spec.help_envvar
        case OptionKind.ENUM | OptionKind.INT | OptionKind.REAL:
            extra += spec.help_constraint
            extra += spec.help_default
            extra += spec.help_envvar
    return extra


def render_help(specs, cpl=DEFAULT_CPL, separator=False, nomore=False, /, *, colorful=False):
    """
    Render the help text of `specs` as a rich Text.

    Parameters
    - specs: iterable of OptionSpec, rendered in order.
    - cpl: characters per line (raised to MINIMUM_CPL when smaller).
    - separator: add a blank line after every entry.
    - nomore: append the paragraph describing "--".
    - colorful: apply the style palette (see __styles__).
    """
    styles = defaultdict(str, {
        "group-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "argument-description": "#9CA3AF",
        "extra-description": "italic #A3A3A3",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    cpl = max(cpl, MINIMUM_CPL)

    help = Text()

    def emit(lines, name, description, /):
        for head, body in lines:
            label = head.rstrip()
            help.append(label, styler(name)).append(head[len(label):])
            help.append(body, styler(description)).append("\n")

    help.append("Options:", styler("group-label")).append("\n")

    for spec in specs:
        style = "flag-name" if spec.kind is OptionKind.FLAG else "option-name"
        if spec.description.startswith("!"):
            emit(_literal(spec.name, spec.description[1:]), style, "argument-description")
        else:
            emit(_wrap(spec.name, split(spec.description, " ", False), cpl), style, "argument-description")

        if extra := _extras(spec):
            emit(_wrap("", split(extra, " ", False), cpl), style, "extra-description")

        if separator:
            help.append("\n")

    if nomore:
        emit(_wrap("--", split(NOMORE, " ", False), cpl), "option-name", "argument-description")

    return help


__all__ = (
    "GAP",
    "MINIMUM_CPL",
    "DEFAULT_CPL",
    "NOMORE",
    "render_help",
)
