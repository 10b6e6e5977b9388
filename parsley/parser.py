"""
Parsley engine: specification list validation and value resolution.

What this module provides
- Parsley: built from a list of OptionSpec; validates it once, then resolves
  argument lists into OptionValues plus leftover positional parameters, and
  renders help for the same list (see parsley.helps).

Resolution phases
- seed: every option starts from its default, overridden by its environment
  variable when one is configured and set. Flags are always defined; "1", "Y"
  and "YES" turn a flag on. Enumeration defaults/environment values must be one
  of the choices; numeric environment values must parse. Numeric defaults and
  environment values are not range-checked, only command-line values are.
- scan: one linear pass over the arguments.
  • after "--" or after the first token not starting with "-" (or empty),
    every remaining token is a positional parameter.
  • "-x" matches a short name, "--name" a long name; any other dash token is
    malformed.
  • value-bearing options consume the next token verbatim.
  • a singleton option (help/version) ends the resolution successfully at once.
- check: every non-singleton required option must be defined.

Failure reporting
- The first usage error stops the resolution. resolve() returns it inside a
  failed Resolution; process() records it (error, error_message) and returns
  False. Usage errors never escape either method.
- Conflicting long/short names are reported as ConflictingOptionWarning when the
  parser is built (also collected in `faults`) and make every later resolution
  fail with "option specification errors".

Quick example
    >>> from parsley import Parsley, flag_spec, str_spec
    >>> parser = Parsley([flag_spec("flag", "f", "A flag."), str_spec("name", "n", "A name.")])
    >>> parser.process(["prog", "-f", "-n", "hi", "extra"])
    True
    >>> parser.options["name"].str, parser.parameters
    ('hi', ('extra',))
"""
import difflib
import os
import sys
from collections.abc import Callable, Iterable, Mapping

from rich.console import Console

from .codec import format_int, format_real, index_of, parse_int, parse_real
from .faults import *
from .helps import DEFAULT_CPL, MINIMUM_CPL, render_help
from .specs import OptionKind, OptionSpec
from .values import OptionValue, OptionValues, Resolution

_TRUTHY = ("1", "Y", "YES")


def _lookup(environ, /):
    """
    normalize an environment source into a `name -> str | None` callable.
    """
    if environ is None:
        return os.environ.get
    if isinstance(environ, Mapping):
        return environ.get
    if isinstance(environ, Callable):
        return environ
    raise TypeError("environ must be a mapping or a callable")


class Parsley:
    """
    Option parser over an immutable list of OptionSpec.

    Parameters
    - specs: iterable of OptionSpec (order matters for lookups and help).
    - cpl: characters per line for help output (floor of 40, default 92).
    - separator: insert a blank line between options in help output.
    - nomore: describe the "--" end-of-options marker in help output.

    State
    - specs, faults and valid are fixed at construction.
    - options, parameters, error and error_message reflect the last process() call.
    """

    def __init__(self, specs, /, *, cpl=DEFAULT_CPL, separator=False, nomore=False):
        if not isinstance(specs, Iterable):
            raise TypeError("Parsley() argument must be an iterable of option specifications")
        self._specs = tuple(specs)
        for spec in self._specs:
            if not isinstance(spec, OptionSpec):
                raise TypeError("Parsley() argument must be an iterable of option specifications")

        self._faults = []
        self._valid = True
        for index, first in enumerate(self._specs):
            for second in self._specs[index + 1:]:
                if first.longname == second.longname or (first.shortname and first.shortname == second.shortname):
                    self._conflict(first, second)

        self.cpl = cpl
        self.separator = separator
        self.nomore = nomore
        self._resolution = Resolution(False, OptionValues(), (), None)

    def _conflict(self, first, second, /):
        fault = ConflictingOptionWarning(
            "conflicting option names: %s and %s" % (first.name, second.name),
            code=FaultCode.CONFLICTING_OPTIONS,
            title="conflicting option names",
            hint="give every option a distinct long name and short name",
            specs=(first, second),
        )
        self._faults.append(fault)
        self._valid = False
        # __trigger__, trigger, _conflict, __init__, then the caller
        trigger(fault, stacklevel=5)

    # --- configuration -------------------------------------------------------

    @property
    def specs(self):
        return self._specs

    @property
    def faults(self):
        return tuple(self._faults)

    @property
    def valid(self):
        return self._valid

    @property
    def cpl(self):
        return self._cpl

    @cpl.setter
    def cpl(self, cpl):
        if not isinstance(cpl, int) or isinstance(cpl, bool):
            raise TypeError("cpl must be an integer")
        self._cpl = max(cpl, MINIMUM_CPL)

    @property
    def separator(self):
        return self._separator

    @separator.setter
    def separator(self, separator):
        self._separator = bool(separator)

    @property
    def nomore(self):
        return self._nomore

    @nomore.setter
    def nomore(self, nomore):
        self._nomore = bool(nomore)

    # --- last outcome --------------------------------------------------------

    @property
    def resolution(self):
        return self._resolution

    @property
    def options(self):
        return self._resolution.options

    @property
    def parameters(self):
        return self._resolution.parameters

    @property
    def error(self):
        return self._resolution.error

    @property
    def error_message(self):
        return self._resolution.message

    # --- resolution ----------------------------------------------------------

    def process(self, arguments, /, *, skip=True, environ=None):
        """
        resolve `arguments`, remember the outcome and return whether it succeeded.

        see resolve() for the parameters.
        """
        self._resolution = self.resolve(arguments, skip=skip, environ=environ)
        return self._resolution.success

    def resolve(self, arguments, /, *, skip=True, environ=None):
        """
        resolve `arguments` into a fresh Resolution (the parser is left untouched).

        Parameters
        - arguments: iterable of str, typically sys.argv.
        - skip: ignore the first argument (the program name).
        - environ: mapping or callable used to read environment variables;
          None reads os.environ.
        """
        arguments = list(arguments)
        if not all(isinstance(argument, str) for argument in arguments):
            raise TypeError("resolve() arguments must be strings")
        lookup = _lookup(environ)

        try:
            values, parameters = self._resolve(arguments[1:] if skip else arguments, lookup)
        except ParsleyException as error:
            return Resolution(False, OptionValues(), (), error)
        return Resolution(True, OptionValues(values), tuple(parameters), None)

    def _resolve(self, arguments, lookup, /):
        if not self._valid:
            raise SpecificationError(
                "option specification errors",
                code=FaultCode.SPECIFICATION_ERRORS,
                title="option specification errors",
                hint="fix the conflicting option names reported when the parser was built",
            )

        values = {spec.longname: self._seed(spec, lookup) for spec in self._specs}
        parameters = []
        specified = set()
        complete = False

        tokens = iter(arguments)
        for token in tokens:
            if complete:
                parameters.append(token)
                continue

            if token == "--":
                complete = True
                continue

            if not token.startswith("-"):
                parameters.append(token)
                complete = True
                continue

            spec = self._find(token)
            if spec.longname in specified:
                raise DuplicateOptionError(
                    "duplicate option: %s" % spec.name,
                    code=FaultCode.DUPLICATE_OPTION,
                    title="duplicate option",
                    hint="specify %s only once" % spec.name,
                    spec=spec,
                    token=token,
                )
            specified.add(spec.longname)

            if spec.kind is OptionKind.FLAG:
                values[spec.longname] = values[spec.longname]._replace(flag=True, defined=True)
            else:
                if (argument := next(tokens, None)) is None:
                    raise MissingArgumentError(
                        "option %s requires an argument." % spec.name,
                        code=FaultCode.MISSING_ARGUMENT,
                        title="missing option argument",
                        hint="add a %s value after %s" % (spec.kind.image, token),
                        spec=spec,
                        token=token,
                    )
                values[spec.longname] = self._consume(spec, values[spec.longname], argument)

            if spec.singleton:
                return values, parameters

        for spec in self._specs:
            if spec.required and not spec.singleton and not values[spec.longname].defined:
                hint = "add %s <%s> to the command line" % (spec.name.split(", ")[-1], spec.kind.image)
                if spec.envvar:
                    hint += " or set the %s environment variable" % spec.envvar
                raise RequiredOptionError(
                    "a value is required for: %s" % spec.name,
                    code=FaultCode.REQUIRED_OPTION,
                    title="required option",
                    hint=hint,
                    spec=spec,
                )

        return values, parameters

    def _seed(self, spec, lookup, /):
        """
        initial value of `spec`: its default, overridden by its environment variable.
        """
        value = OptionValue(defined=spec.has_default)
        environ = lookup(spec.envvar) if spec.envvar else None
        source = "environment variable %s" % spec.envvar if environ is not None else "default"

        match spec.kind:
            case OptionKind.FLAG:
                return value._replace(defined=True, flag=environ in _TRUTHY)

            case OptionKind.STR:
                if environ is not None:
                    return value._replace(defined=True, str=environ)
                return value._replace(str=spec.default) if spec.has_default else value

            case OptionKind.ENUM:
                if environ is not None:
                    value = value._replace(defined=True, str=environ)
                elif spec.has_default:
                    value = value._replace(str=spec.default)
                else:
                    return value._replace(ival=-1)
                if (index := index_of(spec.choices, value.str)) == -1:
                    raise self._disallowed(spec, value.str, source)
                return value._replace(ival=index)

            case OptionKind.INT:
                if spec.has_default:
                    value = value._replace(ival=spec.default)
                if environ is None:
                    return value
                try:
                    return value._replace(defined=True, ival=parse_int(environ))
                except ValueError:
                    raise self._unparsable(spec, environ, source) from None

            case OptionKind.REAL:
                if spec.has_default:
                    value = value._replace(real=spec.default)
                if environ is None:
                    return value
                try:
                    return value._replace(defined=True, real=parse_real(environ))
                except ValueError:
                    raise self._unparsable(spec, environ, source) from None

    def _find(self, token, /):
        """
        return the spec named by an option token, first match wins.
        """
        if len(token) == 2:
            candidates = (spec for spec in self._specs if spec.shortname == token[1])
        elif token.startswith("--") and len(token) >= 3:
            candidates = (spec for spec in self._specs if spec.longname == token[2:])
        else:
            raise MalformedOptionError(
                "invalid option format: %s" % token,
                code=FaultCode.MALFORMED_OPTION,
                title="malformed option",
                hint="write options as -x or --name, and use '--' before parameters starting with '-'",
                token=token,
            )

        if (spec := next(candidates, None)) is not None:
            return spec

        names = [("-" + spec.shortname) for spec in self._specs if spec.shortname]
        names += [("--" + spec.longname) for spec in self._specs]
        suggestions = difflib.get_close_matches(token, names, 5)
        if suggestions:
            hint = "did you mean %r?" % suggestions[0]
        else:
            hint = "check the spelling of the option, or list the available options with --help"
        raise UnknownOptionError(
            "no such option: %s" % token,
            code=FaultCode.UNKNOWN_OPTION,
            title="unknown option",
            hint=hint,
            token=token,
            suggestions=tuple(suggestions),
        )

    def _consume(self, spec, value, argument, /):
        """
        apply the command-line `argument` of a value-bearing `spec` to `value`.
        """
        match spec.kind:
            case OptionKind.STR:
                return value._replace(defined=True, str=argument)

            case OptionKind.ENUM:
                if (index := index_of(spec.choices, argument)) == -1:
                    raise self._disallowed(spec, argument)
                return value._replace(defined=True, str=argument, ival=index)

            case OptionKind.INT:
                try:
                    number = parse_int(argument)
                except ValueError:
                    raise self._unparsable(spec, argument) from None
                self._constrain(spec, number, format_int(number))
                return value._replace(defined=True, ival=number)

            case OptionKind.REAL:
                try:
                    number = parse_real(argument)
                except ValueError:
                    raise self._unparsable(spec, argument) from None
                self._constrain(spec, number, format_real(number))
                return value._replace(defined=True, real=number)

    def _constrain(self, spec, number, image, /):
        if spec.range is None:
            return
        minimum, maximum = spec.range
        if not minimum <= number <= maximum:
            raise OutOfRangeError(
                "invalid value for %s : %s is out of range %s." % (spec.name, image, spec.range_text),
                code=FaultCode.OUT_OF_RANGE,
                title="value out of range",
                hint="use a value from %s" % spec.range_text,
                spec=spec,
                value=number,
            )

    def _disallowed(self, spec, literal, source=None, /):
        prefix = "invalid value" if source is None else "invalid %s value" % source
        return InvalidChoiceError(
            "%s for %s : %s is not one of %s" % (prefix, spec.name, literal, spec.choices_text),
            code=FaultCode.INVALID_CHOICE,
            title="invalid choice",
            hint="use one of %s" % spec.choices_text,
            spec=spec,
            value=literal,
        )

    def _unparsable(self, spec, literal, source=None, /):
        prefix = "invalid value" if source is None else "invalid %s value" % source
        if spec.kind is OptionKind.INT:
            expected = "a valid integer"
            hint = "use a whole decimal number such as 42"
        else:
            expected = "a valid floating point number"
            hint = "use a number such as 3.5 or 1e-3"
        return InvalidLiteralError(
            "%s for %s : '%s' is not %s." % (prefix, spec.name, literal, expected),
            code=FaultCode.INVALID_LITERAL,
            title="invalid %s" % spec.kind.image,
            hint=hint,
            spec=spec,
            value=literal,
        )

    # --- help ----------------------------------------------------------------

    def format_help(self):
        """
        return the help text of the spec list as a plain string.
        """
        return render_help(self._specs, self._cpl, self._separator, self._nomore).plain

    def print_help(self, file=None, /, *, colorful=False):
        """
        write the help text to `file` (stdout by default).
        """
        console = Console(file=file or sys.stdout, highlight=False)
        console.print(
            render_help(self._specs, self._cpl, self._separator, self._nomore, colorful=colorful),
            soft_wrap=True,
            end="",
        )

    def __repr__(self):
        return "%s(%r, cpl=%d, separator=%r, nomore=%r)" % (
            type(self).__name__, list(self._specs), self._cpl, self._separator, self._nomore
        )


__all__ = (
    "Parsley",
)
