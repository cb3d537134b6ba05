r"""
Argoparse params: the composable unit behind every flag and positional argument.

Overview
- ParsedArgs(flags, arguments)
  • flags: canonical flag name → every raw occurrence (variadic flags read them all).
  • arguments: the remaining positional queue, consumed left to right.

- Param (closed variant set, immutable)
  • SingleParam: the atomic declaration (kind, name, aliases, description, primitive, metavar).
  • MapParam: decode inner, then apply a pure function to the value.
  • TransformParam: wrap the whole parse function (attempt-and-retry combinators).
  • OptionalParam: absent input (missing flag/argument) decodes to None.
  • VariadicParam: zero-or-more occurrences/values, bounded by min/max.

- Parse contract
  • param.parse(args) -> (leftover_arguments, value)
  • failures raise CliError subclasses (MissingOptionError, MissingArgumentError,
    InvalidValueError); the first failure stops decoding.

- Combinators (methods, each returns a new param)
  • optional, with_default, map, map_effect, variadic, at_least, at_most, between,
    filter, with_schema, or_else, with_alias (flags only), with_description, with_metavar.
  • with_alias/with_description/with_metavar rewrite the underlying SingleParam via
    transform_single(), so they commute with any Map/Optional/Variadic wrapping.

Introspection
- ParamType metaclass derives __typename__ from the class name, exposes the names in
  __introspectable__ as read-only properties (see utils.mirror) and provides stable
  __repr__/__rich_repr__ implementations.

Quick example:
    >>> from argoparse import flags
    >>> count = flags.integer("count").with_alias("-c").with_default(1)
    >>> count.parse(ParsedArgs({"count": ("3",)}, ()))
    ((), 3)
"""
import copy
import functools
import operator
import re
from enum import StrEnum
from typing import NamedTuple

from pydantic import TypeAdapter, ValidationError

from .faults import CliError, InvalidValueError, MissingArgumentError, MissingOptionError
from .primitives import Primitive
from .utils import *


class Kind(StrEnum):
    ARGUMENT = "argument"
    FLAG = "flag"


class ParsedArgs(NamedTuple):
    flags: dict
    arguments: tuple = ()


class ParamMetadata(NamedTuple):
    optional: bool = False
    variadic: bool = False


class ParamType(type):
    """
    Metaclass wiring introspection onto param classes.

    Responsibilities
    - __typename__: class name split on capitals with hyphens ("single-param").
    - read-only properties for every name listed in __introspectable__.
    - stable __repr__/__rich_repr__ over those same names.
    """
    __introspectable__ = ()

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
            seen = set()
            for klass in type(self).__mro__:
                for name in klass.__dict__.get("__introspectable__", ()):
                    if name not in seen:
                        seen.add(name)
                        yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_bound(cls, name, bound, /):
    if bound is None:
        return None
    if not isinstance(bound, int) or isinstance(bound, bool):
        raise TypeError(f"{cls.__typename__} {name!r} must be an integer")
    if bound < 0:
        raise ValueError(f"{cls.__typename__} {name!r} cannot be negative")
    return bound


def _sanitize_text(cls, name, text, /):
    if not isinstance(text, str):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    if not (text := text.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    return text


class Param(metaclass=ParamType):
    """
    Base class of the param algebra. Not instantiated directly.

    Every param has a 'kind' (Kind.ARGUMENT or Kind.FLAG) and a parse(args) method.
    """
    __introspectable__ = ("kind",)

    def parse(self, args, /):
        raise NotImplementedError

    def extract_single_params(self):
        """
        Flatten to the underlying SingleParam declarations (registry building and help).
        """
        return self._param.extract_single_params()

    def transform_single(self, function, /):
        """
        Rewrite the underlying SingleParam with function, preserving every wrapper.
        """
        raise NotImplementedError

    def metadata(self):
        return self._param.metadata()

    def underlying_single(self):
        """
        Return the one SingleParam this param wraps.

        Raises
        - ValueError: if the param does not wrap exactly one single declaration.
        """
        singles = self.extract_single_params()
        if len(singles) != 1:
            raise ValueError(f"expected exactly one single param, got {len(singles)}")
        return singles[0]

    # --- combinators ---

    def map(self, function, /):
        if not callable(function):
            raise TypeError("map() argument must be callable")
        return MapParam(self, function)

    def map_effect(self, function, /):
        """
        Like map(), but function may reject the value by raising a CliError.
        """
        if not callable(function):
            raise TypeError("map_effect() argument must be callable")

        @rename("map_effect")
        def transform(parse):
            def parser(args):
                leftover, value = parse(args)
                return leftover, function(value)
            return parser

        return TransformParam(self, transform)

    def optional(self):
        return OptionalParam(self)

    def with_default(self, default, /):
        return self.optional().map(lambda value: default if value is None else value)

    def variadic(self, min=None, max=None):
        return VariadicParam(self, min, max)

    def at_least(self, min, /):
        return VariadicParam(self, min, None)

    def at_most(self, max, /):
        return VariadicParam(self, None, max)

    def between(self, min, max, /):
        return VariadicParam(self, min, max)

    def filter(self, predicate, on_false, /):
        """
        Reject decoded values failing predicate with InvalidValueError; on_false(value)
        supplies the "expected" text.
        """
        if not callable(predicate) or not callable(on_false):
            raise TypeError("filter() arguments must be callable")
        single = self.underlying_single()

        @rename("filter")
        def check(value):
            if predicate(value):
                return value
            raise InvalidValueError(single.name, str(value), on_false(value), single.kind)

        return self.map_effect(check)

    def with_schema(self, schema, /):
        """
        Validate (and coerce) the decoded value through a pydantic TypeAdapter.

        The schema can be anything TypeAdapter accepts: a type, an Annotated type with
        constraints, a dataclass or a BaseModel.
        """
        adapter = TypeAdapter(schema)
        single = self.underlying_single()

        @rename("with_schema")
        def validate(value):
            try:
                return adapter.validate_python(value)
            except ValidationError as error:
                reason = "; ".join(detail["msg"] for detail in error.errors())
                raise InvalidValueError(
                    single.name, str(value), f"Schema validation failed: {reason}", single.kind
                ) from None

        return self.map_effect(validate)

    def or_else(self, that, /):
        """
        Try this param; on any CliError, try that() against the same original input.
        """
        if isinstance(that, Param):
            fallback = that
            that = lambda: fallback
        if not callable(that):
            raise TypeError("or_else() argument must be a param or a callable returning one")

        @rename("or_else")
        def transform(parse):
            def parser(args):
                try:
                    return parse(args)
                except CliError:
                    return that().parse(args)
            return parser

        return TransformParam(self, transform)

    def with_alias(self, alias, /):
        if self.kind is not Kind.FLAG:
            raise TypeError(f"{type(self).__typename__} of kind {self.kind} cannot have aliases")
        if not isinstance(alias, str):
            raise TypeError("with_alias() argument must be a string")
        if not (alias := alias.lstrip("-")):
            raise ValueError("with_alias() argument cannot be empty")
        return self.transform_single(lambda single: copy.replace(single, aliases=(*single.aliases, alias)))

    def with_description(self, description, /):
        description = _sanitize_text(type(self), "description", description)
        return self.transform_single(lambda single: copy.replace(single, description=description))

    def with_metavar(self, metavar, /):
        metavar = _sanitize_text(type(self), "metavar", metavar)
        return self.transform_single(lambda single: copy.replace(single, metavar=metavar))


class SingleParam(Param):
    """
    The atomic declaration: one canonical name bound to one primitive.

    Fields
    - kind: argument (positional, bound by declaration order) or flag (named).
    - name: canonical name, without leading dashes for flags.
    - aliases: extra flag names (no dashes); always empty for arguments.
    - description: optional help text.
    - primitive: the Primitive decoding raw strings.
    - metavar: optional type label overriding primitive.typename in help.

    Parse semantics
    - argument: fails MissingArgumentError on an empty queue; otherwise decodes the
      front value and returns the rest of the queue.
    - flag: absent booleans decode to False; any other absent flag fails
      MissingOptionError; otherwise only the first occurrence is decoded.
    """
    __introspectable__ = ("name", "aliases", "description", "primitive", "metavar")

    def __init__(self, kind, name, primitive, *, description=None, aliases=(), metavar=None):
        cls = type(self)
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        if not name:
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        if not isinstance(primitive, Primitive):
            raise TypeError(f"{cls.__typename__} 'primitive' must be a primitive")
        aliases = tuple(aliases)
        if any(not isinstance(alias, str) or not alias for alias in aliases):
            raise TypeError(f"{cls.__typename__} 'aliases' must be non-empty strings")
        if aliases and kind is not Kind.FLAG:
            raise TypeError(f"{cls.__typename__} of kind {kind} cannot have aliases")

        self._kind = kind
        self._name = name
        self._primitive = primitive
        self._description = description if description is None else _sanitize_text(cls, "description", description)
        self._aliases = aliases
        self._metavar = metavar if metavar is None else _sanitize_text(cls, "metavar", metavar)

    @property
    def typename(self):
        return self._primitive.typename if self._metavar is None else self._metavar

    def parse(self, args, /):
        if self._kind is Kind.ARGUMENT:
            if not args.arguments:
                raise MissingArgumentError(self._name)
            raw = args.arguments[0]
            return tuple(args.arguments[1:]), self._decode(raw)

        values = args.flags.get(self._name)
        if not values:
            if self._primitive.is_boolean:
                return args.arguments, False
            raise MissingOptionError(self._name)
        # Later occurrences are only read by VariadicParam
        return args.arguments, self._decode(values[0])

    def _decode(self, raw):
        try:
            return self._primitive.parse(raw)
        except ValueError as error:
            raise InvalidValueError(self._name, raw, str(error), self._kind) from None

    def extract_single_params(self):
        return [self]

    def transform_single(self, function, /):
        return function(self)

    def metadata(self):
        return ParamMetadata()

    def __replace__(self, /, **changes):
        fields = {
            "kind": self._kind,
            "name": self._name,
            "primitive": self._primitive,
            "description": self._description,
            "aliases": self._aliases,
            "metavar": self._metavar,
        }
        if unknown := changes.keys() - fields.keys():
            raise TypeError(f"{type(self).__typename__} has no fields: {', '.join(sorted(unknown))}")
        fields |= changes
        return SingleParam(fields.pop("kind"), fields.pop("name"), fields.pop("primitive"), **fields)


class MapParam(Param):
    __introspectable__ = ("param", "function")

    def __init__(self, param, function, /):
        self._kind = param.kind
        self._param = param
        self._function = function

    def parse(self, args, /):
        leftover, value = self._param.parse(args)
        return leftover, self._function(value)

    def transform_single(self, function, /):
        return MapParam(self._param.transform_single(function), self._function)


class TransformParam(Param):
    """
    Wraps the inner parse function itself: function(parse) -> parse.
    """
    __introspectable__ = ("param", "function")

    def __init__(self, param, function, /):
        self._kind = param.kind
        self._param = param
        self._function = function
        self._parser = function(param.parse)

    def parse(self, args, /):
        return self._parser(args)

    def transform_single(self, function, /):
        return TransformParam(self._param.transform_single(function), self._function)


class OptionalParam(Param):
    """
    Absent input decodes to None with the positional queue untouched; only
    MissingOptionError/MissingArgumentError are absorbed, every other fault propagates.
    """
    __introspectable__ = ("param",)

    def __init__(self, param, /):
        self._kind = param.kind
        self._param = param

    def parse(self, args, /):
        try:
            return self._param.parse(args)
        except (MissingOptionError, MissingArgumentError):
            return args.arguments, None

    def transform_single(self, function, /):
        return OptionalParam(self._param.transform_single(function))

    def metadata(self):
        return self._param.metadata()._replace(optional=True)


class VariadicParam(Param):
    """
    Collects a list of values.

    - argument kind: decode from the front of the queue until it is exhausted or
      'max' values were read; fewer than 'min' fails InvalidValueError.
    - flag kind: gather every occurrence under the canonical name and all aliases,
      enforce min/max on the count (zero occurrences with min >= 1 is a
      MissingOptionError), then decode each occurrence on its own.
    """
    __introspectable__ = ("param", "min", "max")

    def __init__(self, param, min=None, max=None, /):
        cls = type(self)
        min = _sanitize_bound(cls, "min", min)
        max = _sanitize_bound(cls, "max", max)
        if min is not None and max is not None and min > max:
            raise ValueError(f"{cls.__typename__} 'min' cannot be greater than 'max'")
        self._kind = param.kind
        self._param = param
        self._min = min
        self._max = max
        self._single = param.underlying_single()

    def parse(self, args, /):
        if self._single.kind is Kind.ARGUMENT:
            return self._parse_arguments(args)
        return self._parse_flags(args)

    def _parse_arguments(self, args):
        results = []
        current = tuple(args.arguments)
        while current and (self._max is None or len(results) < self._max):
            remaining, value = self._param.parse(ParsedArgs(args.flags, current))
            results.append(value)
            if len(remaining) >= len(current):
                break  # no progress
            current = tuple(remaining)
        if self._min is not None and len(results) < self._min:
            raise InvalidValueError(
                self._single.name,
                f"{len(results)} values",
                f"at least {quantify(self._min, 'value')}",
                self._single.kind,
            )
        return current, results

    def _parse_flags(self, args):
        single = self._single
        values = [value for name in (single.name, *single.aliases) for value in args.flags.get(name, ())]
        count = len(values)
        if self._min is not None and count < self._min:
            if count == 0:
                raise MissingOptionError(single.name)
            raise InvalidValueError(
                single.name, f"{count} occurrences", f"at least {quantify(self._min, 'value')}", single.kind
            )
        if self._max is not None and count > self._max:
            raise InvalidValueError(
                single.name, f"{count} occurrences", f"at most {quantify(self._max, 'value')}", single.kind
            )
        results = []
        for value in values:
            _, decoded = self._param.parse(ParsedArgs({single.name: (value,)}, ()))
            results.append(decoded)
        return args.arguments, results

    def transform_single(self, function, /):
        return VariadicParam(self._param.transform_single(function), self._min, self._max)

    def metadata(self):
        return self._param.metadata()._replace(variadic=True)


__all__ = (
    "Kind",
    "ParsedArgs",
    "ParamMetadata",
    "Param",
    "SingleParam",
    "MapParam",
    "TransformParam",
    "OptionalParam",
    "VariadicParam",
)

# Keep the metaclass out of star-imports and docs.
del ParamType
