"""
Argoparse token parser: bind lexed tokens to a command tree.

What this module provides
- FlagRegistry: a command's flag declarations indexed by canonical name and aliases.
- consume_flag_value(): the shared rule deciding which value a flag token takes.
- consume_known_flags(): pull the registry's flags out of a token stream, leaving
  everything else (unknown flags included) in the remainder.
- extract_builtin_options(): --help/-h, --version and --log-level, recognized anywhere.
- parse_args(): recursive per-command parse into ParsedTokens.
- command_path(): the subcommand names selected by a ParsedTokens chain.

Core ideas
- Flag recognition is exhaustive: every unrecognized flag and unknown subcommand is
  collected in ParsedTokens.errors (parent errors first) instead of stopping early.
- A Value that names a subcommand (before any positional was collected) switches into
  the child; the tail is scanned once more for the parent's own flags, so a parent
  flag may follow the subcommand name.
- Operands after "--" always belong to the outermost command.

Commands are duck-typed here: anything with 'name', 'subcommands' and a 'config'
exposing 'flags' and 'arguments' param lists can be parsed.
"""
import logging
from typing import NamedTuple

from . import flags as _flags
from .faults import UnknownSubcommandError, UnrecognizedOptionError
from .lexer import LexResult, LongOption, Value, flag_name, is_flag_token
from .params import ParsedArgs
from .primitives import is_boolean_literal
from .suggestions import dashed, suggest

logger = logging.getLogger(__name__)


LOG_LEVELS = ("all", "trace", "debug", "info", "warn", "warning", "error", "fatal", "none")

HELP = _flags.boolean("help").with_alias("h").with_description("Show help information")
VERSION = _flags.boolean("version").with_description("Show version information")
LOG_LEVEL = _flags.choice("log-level", LOG_LEVELS).optional().with_description("Sets the minimum log level")


class FlagRegistry:
    """
    Flag declarations of one command, looked up by canonical name or alias.
    """
    __slots__ = ("params", "index")

    def __init__(self, params, /):
        self.params = tuple(params)
        self.index = {}
        for param in self.params:
            self.index[param.name] = param
            for alias in param.aliases:
                self.index[alias] = param

    @classmethod
    def of(cls, params, /):
        """
        build a registry from (possibly wrapped) flag params.
        """
        return cls(single for param in params for single in param.extract_single_params())

    def get(self, name, /):
        return self.index.get(name)

    def names(self):
        return [name for param in self.params for name in (param.name, *param.aliases)]

    def empty(self):
        return {param.name: [] for param in self.params}


def consume_flag_value(tokens, index, token, spec, /):
    """
    Decide the value of the flag token at tokens[index].

    Returns (value, skip): value is None when this occurrence carries no value, and
    skip is the number of extra tokens consumed (0 or 1).

    - an inline value (--x=1, -x=1) wins and consumes nothing more.
    - boolean flags take the next Value only when it is a boolean literal; otherwise
      the flag means "true" and the following token is left alone.
    - other flags take the next Value, whatever it is.
    """
    if token.value is not None:
        return token.value, 0
    following = tokens[index + 1] if index + 1 < len(tokens) else None
    if spec.primitive.is_boolean:
        if isinstance(following, Value) and is_boolean_literal(following.value):
            return following.value, 1
        return "true", 0
    if isinstance(following, Value):
        return following.value, 1
    return None, 0


def consume_known_flags(tokens, registry, /):
    """
    Split tokens into (flag map, remainder) using registry; unknown flags and values
    stay in the remainder in their original order.
    """
    flags = registry.empty()
    remainder = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if not is_flag_token(token) or (spec := registry.get(flag_name(token))) is None:
            remainder.append(token)
            index += 1
            continue
        value, skip = consume_flag_value(tokens, index, token, spec)
        if value is not None:
            flags[spec.name].append(value)
        index += 1 + skip
    return flags, tuple(remainder)


BUILTIN_REGISTRY = FlagRegistry.of((HELP, VERSION, LOG_LEVEL))


class BuiltinOptions(NamedTuple):
    help: bool
    version: bool
    log_level: str | None
    remainder: tuple


def extract_builtin_options(tokens, /):
    """
    Pull --help/-h, --version and --log-level out of the whole token stream.

    Raises
    - InvalidValueError: when --log-level names an unknown level.
    """
    flags, remainder = consume_known_flags(tokens, BUILTIN_REGISTRY)
    args = ParsedArgs(flags, ())
    _, help = HELP.parse(args)
    _, version = VERSION.parse(args)
    _, log_level = LOG_LEVEL.parse(args)
    return BuiltinOptions(help, version, log_level, remainder)


class Subparse(NamedTuple):
    name: str
    parsed: "ParsedTokens"


class ParsedTokens(NamedTuple):
    flags: dict
    arguments: tuple
    errors: tuple = ()
    subcommand: Subparse | None = None


def _unrecognized(token, registry, path):
    suggestions = [dashed(name) for name in suggest(flag_name(token), registry.names())]
    option = f"--{token.name}" if isinstance(token, LongOption) else f"-{token.flag}"
    return UnrecognizedOptionError(option, path, suggestions)


def parse_args(lexed, command, path=(), /):
    """
    Bind a LexResult to command (and, recursively, to the selected subcommand).

    Parameters
    - lexed: LexResult (tokens with built-ins already removed, plus trailing operands).
    - command: the command to bind against.
    - path: names of the enclosing commands (empty at the top level).

    Returns
    - ParsedTokens with this command's flag map and positionals, every collected
      error (parent first) and the child parse when a subcommand was selected.
    """
    registry = FlagRegistry.of(command.config.flags)
    subcommands = {subcommand.name: subcommand for subcommand in command.subcommands}
    path = (*path, command.name)
    tokens = lexed.tokens

    flags = registry.empty()
    errors = []
    values = []
    collecting = False
    selected = None
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if is_flag_token(token):
            if (spec := registry.get(flag_name(token))) is None:
                errors.append(_unrecognized(token, registry, path))
                index += 1
                continue
            value, skip = consume_flag_value(tokens, index, token, spec)
            if value is not None:
                flags[spec.name].append(value)
            index += 1 + skip
            continue

        if not collecting:
            if (subcommand := subcommands.get(token.value)) is not None:
                tail, remainder = consume_known_flags(tokens[index + 1:], registry)
                for name, occurrences in tail.items():
                    flags[name].extend(occurrences)
                selected = subcommand, remainder
                break
            if not command.config.arguments and subcommands:
                errors.append(UnknownSubcommandError(token.value, path, suggest(token.value, list(subcommands))))
            collecting = True
        values.append(token.value)
        index += 1

    if selected is None:
        if errors:
            logger.debug("%s: %d parse error(s)", " ".join(path), len(errors))
        return ParsedTokens(flags, (*values, *lexed.trailing_operands), tuple(errors))

    subcommand, remainder = selected
    logger.debug("%s: switching into subcommand %r", " ".join(path), subcommand.name)
    child = parse_args(LexResult(remainder, ()), subcommand, path)
    return ParsedTokens(
        flags,
        tuple(lexed.trailing_operands),
        (*errors, *child.errors),
        Subparse(subcommand.name, child),
    )


def command_path(parsed, /):
    """
    the names of the subcommands selected below the top-level command.
    """
    names = []
    while parsed.subcommand is not None:
        names.append(parsed.subcommand.name)
        parsed = parsed.subcommand.parsed
    return tuple(names)


__all__ = (
    "LOG_LEVELS",
    "HELP",
    "VERSION",
    "LOG_LEVEL",
    "FlagRegistry",
    "BUILTIN_REGISTRY",
    "consume_flag_value",
    "consume_known_flags",
    "BuiltinOptions",
    "extract_builtin_options",
    "Subparse",
    "ParsedTokens",
    "parse_args",
    "command_path",
)
