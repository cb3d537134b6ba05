"""
Argoparse command layer: declare, compose and run command trees.

What this module provides
- Command: binds a config tree (params, arrays of params, nested mappings) to a name,
  an optional description, an optional handler and optional subcommands.
  • parse(parsed_tokens) decodes every declared param in declaration order (stopping
    at the first fault) and rebuilds the nested config shape.
  • handle(input, path) dispatches to the selected subcommand, or to this command's
    handler; a command without a handler raises ShowHelp.
  • build_help_doc(path) describes the command for the help renderer.
  • with_handler / with_subcommands / with_description return new commands.

- Factories and runners
  • make(name, config, handler, description=...): build a Command.
  • run_with(command, argv, version=...): lex, parse, render help/version/errors or
    call the handler; returns a process exit status and never raises on bad input.
  • run(command, version=...): run_with over sys.argv[1:], exiting on failure.

Quick start
    from argoparse import arguments, flags, make, run

    def greet(config):
        print(("HELLO %s" if config["shout"] else "hello %s") % config["name"])

    tool = make("greet", {
        "name": arguments.string("name").with_description("Who to greet"),
        "shout": flags.boolean("shout").with_alias("s"),
    }, greet)

    if __name__ == "__main__":
        run(tool, version="1.0.0")

Execution order of run_with
1. lex argv; extract --help/-h, --version and --log-level from the whole stream.
2. bind tokens to the command tree (flags are recognized exhaustively).
3. --help: print help for the deepest selected command; stop.
4. --version: print "<name> v<version>"; stop.
5. collected errors: print help, then the ERROR(S) block on stderr; stop.
6. decode params; on the first fault print help plus that fault; stop.
7. call the handler (awaiting it when it returns an awaitable).

Design notes
- The one declaration-time check is duplicate flag names between a parent and a
  direct subcommand: DuplicateOptionError is raised while building the command.
- Commands and params are immutable; the same tree can be run many times, from
  many threads.
"""
import asyncio
import copy
import functools
import inspect
import logging
import operator
import re
import sys

from rich.console import Console

from .config import ConfigInternal, parse_config, reconstruct
from .faults import CliError, DuplicateOptionError, ShowHelp, UserError, render_errors
from .helpdoc import ArgDoc, FlagDoc, HelpDoc, SubcommandDoc, render_help_doc, render_version
from .lexer import LexResult, lex
from .params import ParsedArgs
from .parser import BUILTIN_REGISTRY, command_path, consume_known_flags, extract_builtin_options, parse_args
from .suggestions import dashed
from .utils import *

logger = logging.getLogger(__name__)

console = Console(highlight=False, soft_wrap=True)
error_console = Console(stderr=True, highlight=False, soft_wrap=True)

SUBCOMMAND_KEY = "_subcommand"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LOG_LEVELS = {
    "all": logging.NOTSET,
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "none": logging.CRITICAL + 10,
}


class CommandType(type):
    """
    Metaclass for Command: __typename__, read-only properties for __introspectable__,
    stable __repr__/__rich_repr__ over __displayable__, and sealing against subclassing.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the declaration fields of a Command in place.

    - name: non-empty string without whitespace, not starting with '-'.
    - description: None or a non-empty string (trimmed).
    - handler: None or a callable.
    - subcommands: commands with unique names.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or name.startswith("-") or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word not starting with '-'")

    if (description := metadata["description"]) is not None:
        if not isinstance(description, str):
            raise TypeError(f"{cls.__typename__} 'description' must be a string")
        elif not (description := description.strip()):
            raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = description

    if metadata["handler"] is not None and not callable(metadata["handler"]):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")

    subcommands = tuple(metadata["subcommands"])
    if not all(isinstance(subcommand, Command) for subcommand in subcommands):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be commands")
    names = [subcommand.name for subcommand in subcommands]
    if len(names) != len(set(names)):
        raise ValueError(f"{cls.__typename__} 'subcommands' must have unique names")
    metadata["subcommands"] = subcommands


def _flag_names(config):
    return [single.name for param in config.flags for single in param.extract_single_params()]


def check_for_duplicate_flags(name, config, subcommands, /):
    """
    Raise DuplicateOptionError when a direct subcommand declares a flag whose
    canonical name is already declared by the parent.
    """
    parents = set(_flag_names(config))
    for subcommand in subcommands:
        for option in _flag_names(subcommand.config):
            if option in parents:
                raise DuplicateOptionError(option, name, subcommand.name)


class Command(metaclass=CommandType):
    """
    An immutable command declaration.

    Fields (read-only)
    - name, description, handler, subcommands
    - config: the flattened ConfigInternal (flags, arguments, ordered params, tree)

    The parse result is a dict mirroring the config tree; when a subcommand was
    selected it also holds "_subcommand": {"name": <name>, "result": <child result>}.
    """
    __introspectable__ = (
        "name",
        "description",
        "handler",
        "subcommands",
        "config",
    )

    __displayable__ = (
        "name",
        "description",
        "subcommands",
    )

    def __init__(self, name, config=None, handler=None, /, *, description=None, subcommands=()):
        metadata = {"name": name, "description": description, "handler": handler, "subcommands": subcommands}
        _sanitize_metadata(type(self), metadata)

        if not isinstance(config, ConfigInternal):
            config = parse_config(config)
        check_for_duplicate_flags(metadata["name"], config, metadata["subcommands"])

        self._name = metadata["name"]
        self._description = metadata["description"]
        self._handler = metadata["handler"]
        self._subcommands = metadata["subcommands"]
        self._config = config

    def __replace__(self, /, **changes):
        fields = {
            "name": self._name,
            "config": self._config,
            "handler": self._handler,
            "description": self._description,
            "subcommands": self._subcommands,
        } | changes
        return Command(fields["name"], fields["config"], fields["handler"],
                       description=fields["description"], subcommands=fields["subcommands"])

    def with_handler(self, handler, /):
        return copy.replace(self, handler=handler)

    def with_subcommands(self, subcommands, /):
        return copy.replace(self, subcommands=tuple(subcommands))

    def with_description(self, description, /):
        return copy.replace(self, description=description)

    def subcommand(self, name, /):
        """
        Return the direct subcommand called name, or None.
        """
        for subcommand in self._subcommands:
            if subcommand.name == name:
                return subcommand
        return None

    def parse(self, parsed, /):
        """
        Decode ParsedTokens into the nested config shape.

        Params are decoded in declaration order against a shared positional queue;
        the first CliError propagates.
        """
        flags = parsed.flags
        current = tuple(parsed.arguments)
        values = []
        for param in self._config.ordered_params:
            current, value = param.parse(ParsedArgs(flags, current))
            values.append(value)
        result = reconstruct(self._config.tree, values)

        if parsed.subcommand is None or (subcommand := self.subcommand(parsed.subcommand.name)) is None:
            return result
        return result | {SUBCOMMAND_KEY: {
            "name": subcommand.name,
            "result": subcommand.parse(parsed.subcommand.parsed),
        }}

    def handle(self, input, path=Unset, /):
        """
        Run the handler for input, descending into the selected subcommand.

        Returns whatever the handler returns (possibly an awaitable).

        Raises
        - ShowHelp: when the resolved command has no handler.
        """
        path = tuple(coalesce(path, (self._name,)))
        if self._subcommands and (selection := input.get(SUBCOMMAND_KEY)) is not None:
            if (child := self.subcommand(selection["name"])) is None:
                raise ShowHelp(path)
            return child.handle(selection["result"], (*path, child.name))
        if self._handler is None:
            raise ShowHelp(path)
        logger.debug("dispatching to %s", " ".join(path))
        return self._handler(input)

    def build_help_doc(self, path=Unset, /):
        path = tuple(coalesce(path, (self._name,)))

        args = []
        for param in self._config.arguments:
            metadata = param.metadata()
            for single in param.extract_single_params():
                args.append(ArgDoc(
                    single.name,
                    single.typename,
                    single.description,
                    not metadata.optional,
                    metadata.variadic,
                ))

        usage = [" ".join(path) if path else self._name]
        if self._subcommands:
            usage.append("<subcommand>")
        usage.append("[flags]")
        for arg in args:
            placeholder = f"<{arg.name}...>" if arg.variadic else f"<{arg.name}>"
            usage.append(placeholder if arg.required else f"[{placeholder}]")

        flags = []
        for param in self._config.flags:
            for single in param.extract_single_params():
                flags.append(FlagDoc(
                    single.name,
                    tuple(map(dashed, single.aliases)),
                    single.typename,
                    single.description,
                    not single.primitive.is_boolean,
                ))

        return HelpDoc(
            self._description or "",
            " ".join(usage),
            tuple(flags),
            tuple(args),
            tuple(SubcommandDoc(subcommand.name, subcommand.description or "") for subcommand in self._subcommands),
        )


def make(name, config=None, handler=None, /, *, description=None):
    """
    Build a Command from a name, a config tree and an optional handler.

    Parameters
    - name: command name shown in usage lines and matched for subcommands.
    - config: mapping of key → param | list/tuple of config values | nested mapping.
    - handler: callable receiving the decoded config dict (may return an awaitable).
    - description: short help text.
    """
    return Command(name, config, handler, description=description)


def help_for_path(command, path, /):
    """
    Build the HelpDoc of the command reached by following path (first element is the
    top-level command's name); unknown segments are skipped.
    """
    current = command
    for name in tuple(path)[1:]:
        if (subcommand := current.subcommand(name)) is not None:
            current = subcommand
    return current.build_help_doc(tuple(path))


def _apply_log_level(level):
    logging.getLogger().setLevel(_LOG_LEVELS[level])
    logger.debug("log level set to %s", level)


async def _drive(awaitable):
    return await awaitable


def _complete(awaitable):
    """
    Run an awaitable handler result to completion on a fresh event loop.

    Raises
    - RuntimeError: when called from a running event loop; the awaitable is closed
      (when it is a coroutine) so it is not reported as never awaited.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_drive(awaitable))
    if inspect.iscoroutine(awaitable):
        awaitable.close()
    raise RuntimeError(
        "run_with() cannot drive an awaitable handler inside a running event loop; "
        "call Command.handle() and await its result instead"
    )


def run_with(command, argv, /, *, version, stdout=Unset, stderr=Unset, colorful=True):
    """
    Run command against argv and return an exit status.

    Parameters
    - command: the top-level Command.
    - argv: iterable of raw argument strings (without the program name).
    - version: version string printed by --version.
    - stdout / stderr: rich Consoles (defaults: module-level console / error_console).
    - colorful: style help and errors with the palette (rich strips styles when the
      output is not a terminal).

    Returns
    - 0 after running the handler or printing help/version.
    - 1 when parsing failed or the handler raised UserError.

    Raises
    - whatever the handler raises, except ShowHelp and UserError.
    - RuntimeError: when the handler returns an awaitable while an event loop is
      already running in this thread (asyncio.run cannot nest).
    """
    stdout = coalesce(stdout, console)
    stderr = coalesce(stderr, error_console)

    def show(path, errors=()):
        stdout.print(render_help_doc(help_for_path(command, path), colorful=colorful))
        if errors:
            stderr.print(render_errors(errors, colorful=colorful))

    lexed = lex(argv)
    logger.debug("lexed %d token(s) and %d trailing operand(s)", len(lexed.tokens), len(lexed.trailing_operands))

    try:
        builtins = extract_builtin_options(lexed.tokens)
    except CliError as error:
        # report against the command the rest of argv selects
        _, remainder = consume_known_flags(lexed.tokens, BUILTIN_REGISTRY)
        parsed = parse_args(LexResult(remainder, lexed.trailing_operands), command)
        show((command.name, *command_path(parsed)), (error,))
        return 1

    if builtins.log_level is not None:
        _apply_log_level(builtins.log_level)

    parsed = parse_args(LexResult(builtins.remainder, lexed.trailing_operands), command)
    path = (command.name, *command_path(parsed))

    if builtins.help:
        show(path)
        return 0
    if builtins.version:
        stdout.print(render_version(command.name, version, colorful=colorful))
        return 0

    if parsed.errors:
        show(path, parsed.errors)
        return 1

    try:
        input = command.parse(parsed)
    except CliError as error:
        show(path, (error,))
        return 1

    try:
        result = command.handle(input, (command.name,))
        if inspect.isawaitable(result):
            _complete(result)
    except ShowHelp as signal:
        show(signal.command_path)
        return 0
    except UserError as error:
        stderr.print(render_errors((error,), colorful=colorful))
        return 1
    return 0


def run(command, /, *, version):
    """
    run_with() over sys.argv[1:]; exits the process with the status when it is non-zero.
    """
    if status := run_with(command, sys.argv[1:], version=version):
        sys.exit(status)


__all__ = (
    "Command",
    "make",
    "help_for_path",
    "check_for_duplicate_flags",
    "run_with",
    "run",
)

# Remove the internal metaclass from the module namespace; not part of the public API.
del CommandType
