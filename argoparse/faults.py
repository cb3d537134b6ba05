"""
Argoparse faults: the closed set of command-line errors and their rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault reason.
- CliError: base exception carrying a read-only mapping of fields; 'message' is a
  pure function of those fields and never changes after construction.
- Concrete reasons: UnrecognizedOptionError, DuplicateOptionError,
  MissingOptionError, MissingArgumentError, InvalidValueError,
  UnknownSubcommandError, ShowHelp, UserError.
- suggest_text(): the "Did you mean this?" tail shared by suggestion-aware faults.
- format_errors(): the ERROR / ERRORS block printed to stderr.

Values versus raises
- Token-level faults (unrecognized flags, unknown subcommands) are collected as plain
  values in a tuple and reported all at once.
- Decode-level faults are raised by Param.parse and stop at the first failure.
- DuplicateOptionError is the one fault raised while *declaring* commands.

Rendering
- Every fault implements __rich__ and renders as a styled rich Text. Styles come
  from utils.palette(), so hosts can override them through __styles__ in __main__.
"""
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import palette


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_SUBCOMMAND
    - flags (1111x): UNRECOGNIZED_OPTION, DUPLICATE_OPTION, MISSING_OPTION
    - positionals (1112x): MISSING_ARGUMENT
    - values (1113x): INVALID_VALUE
    - signals and delegated (1114x): SHOW_HELP, USER_ERROR
    """
    UNKNOWN_SUBCOMMAND  = 11102

    UNRECOGNIZED_OPTION = 11112
    DUPLICATE_OPTION    = 11115
    MISSING_OPTION      = 11117

    MISSING_ARGUMENT    = 11125

    INVALID_VALUE       = 11131

    SHOW_HELP           = 11141
    USER_ERROR          = 11142


def suggest_text(suggestions, /):
    """
    the suggestion tail appended to unrecognized-option and unknown-subcommand messages.

    returns an empty string when there is nothing to suggest.
    """
    if not suggestions:
        return ""
    return "\n\n  Did you mean this?\n    " + "\n    ".join(suggestions)


def _freeze(value):
    # lists would make faults unhashable and mutable from the outside
    if isinstance(value, list):
        return tuple(value)
    return value


class CliError(Exception):
    """
    base type for every command-line fault.

    fields
    - each subclass declares its field names in __fields__; they are stored in a
      read-only mapping (self.fields) and mirrored as attributes.

    behavior
    - message: computed from the fields (see subclasses).
    - str(fault) == fault.message.
    - equality/hash: by concrete type and fields, so faults compare as values.
    - copy.replace(fault, **changes) returns a new fault with updated fields.
    """
    __fields__ = ()
    code = None

    def __init__(self, **fields):
        if unknown := fields.keys() - set(type(self).__fields__):
            raise TypeError(f"{type(self).__name__} got unexpected fields: {', '.join(sorted(unknown))}")
        if missing := set(type(self).__fields__) - fields.keys():
            raise TypeError(f"{type(self).__name__} is missing fields: {', '.join(sorted(missing))}")
        fields = {name: _freeze(fields[name]) for name in type(self).__fields__}
        super().__init__(*fields.values())
        self.fields = MappingProxyType(fields)

    def __getattr__(self, name):
        try:
            return self.__dict__["fields"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    @property
    def message(self):
        raise NotImplementedError

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(f'{key}={value!r}' for key, value in self.fields.items())})"

    def __eq__(self, other):
        if not isinstance(other, CliError):
            return NotImplemented
        return type(self) is type(other) and dict(self.fields) == dict(other.fields)

    def __hash__(self):
        return hash((type(self), tuple(self.fields.items())))

    def __replace__(self, /, **changes):
        return type(self)(**{**self.fields, **changes})

    def __rich__(self):
        return Text(self.message, palette()["error-message"])


class UnrecognizedOptionError(CliError):
    __fields__ = ("option", "command", "suggestions")
    code = FaultCode.UNRECOGNIZED_OPTION

    def __init__(self, option, command=None, suggestions=()):
        super().__init__(option=option, command=command, suggestions=suggestions)

    @property
    def message(self):
        if self.command:
            base = f"Unrecognized flag: {self.option} in command {' '.join(self.command)}"
        else:
            base = f"Unrecognized flag: {self.option}"
        return base + suggest_text(self.suggestions)


class DuplicateOptionError(CliError):
    __fields__ = ("option", "parent_command", "child_command")
    code = FaultCode.DUPLICATE_OPTION

    def __init__(self, option, parent_command, child_command):
        super().__init__(option=option, parent_command=parent_command, child_command=child_command)

    @property
    def message(self):
        return f'Duplicate flag "{self.option}" in parent "{self.parent_command}" and subcommand "{self.child_command}".'


class MissingOptionError(CliError):
    __fields__ = ("option",)
    code = FaultCode.MISSING_OPTION

    def __init__(self, option):
        super().__init__(option=option)

    @property
    def message(self):
        return f"Missing required flag: --{self.option}"


class MissingArgumentError(CliError):
    __fields__ = ("argument",)
    code = FaultCode.MISSING_ARGUMENT

    def __init__(self, argument):
        super().__init__(argument=argument)

    @property
    def message(self):
        return f"Missing required argument: {self.argument}"


class InvalidValueError(CliError):
    __fields__ = ("option", "value", "expected", "kind")
    code = FaultCode.INVALID_VALUE

    def __init__(self, option, value, expected, kind):
        super().__init__(option=option, value=value, expected=expected, kind=kind)

    @property
    def message(self):
        if self.kind == "argument":
            return f'Invalid value for argument <{self.option}>: "{self.value}". Expected: {self.expected}'
        return f'Invalid value for flag --{self.option}: "{self.value}". Expected: {self.expected}'


class UnknownSubcommandError(CliError):
    __fields__ = ("subcommand", "parent", "suggestions")
    code = FaultCode.UNKNOWN_SUBCOMMAND

    def __init__(self, subcommand, parent=None, suggestions=()):
        super().__init__(subcommand=subcommand, parent=parent, suggestions=suggestions)

    @property
    def message(self):
        if self.parent:
            base = f'Unknown subcommand "{self.subcommand}" for "{" ".join(self.parent)}"'
        else:
            base = f'Unknown subcommand "{self.subcommand}"'
        return base + suggest_text(self.suggestions)


class ShowHelp(CliError):
    """
    signal: show help for command_path instead of running a handler.
    """
    __fields__ = ("command_path",)
    code = FaultCode.SHOW_HELP

    def __init__(self, command_path=()):
        super().__init__(command_path=tuple(command_path))

    @property
    def message(self):
        return "Help requested"


class UserError(CliError):
    """
    raised by handlers to report a user-facing failure without a traceback.
    """
    __fields__ = ("cause",)
    code = FaultCode.USER_ERROR

    def __init__(self, cause):
        super().__init__(cause=cause)

    @property
    def message(self):
        return str(self.cause)


def format_errors(errors, /):
    """
    render the ERROR (single) or ERRORS (bulleted) block; empty when there is nothing to report.
    """
    errors = tuple(errors)
    if not errors:
        return ""
    if len(errors) == 1:
        return f"\nERROR\n  {errors[0].message}"
    return "\nERRORS\n" + "\n".join(f"  {error.message}" for error in errors)


def render_errors(errors, /, *, colorful=True):
    """
    styled counterpart of format_errors(): same characters, with the title and
    messages highlighted when colorful is true.
    """
    errors = tuple(errors)
    if not errors:
        return Text("")
    styles = palette() if colorful else {"error-title": "", "error-message": ""}
    title = "ERROR" if len(errors) == 1 else "ERRORS"
    return Text.assemble(
        "\n",
        (title, styles["error-title"]),
        *(part for error in errors for part in ("\n  ", (error.message, styles["error-message"])))
    )


__all__ = (
    "FaultCode",
    "CliError",
    "UnrecognizedOptionError",
    "DuplicateOptionError",
    "MissingOptionError",
    "MissingArgumentError",
    "InvalidValueError",
    "UnknownSubcommandError",
    "ShowHelp",
    "UserError",
    "suggest_text",
    "format_errors",
    "render_errors",
)
