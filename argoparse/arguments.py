"""
Argoparse argument constructors: positional inputs, bound in declaration order.

Arguments share the flag combinators except with_alias (positionals have no names
on the command line). Boolean and key=value primitives are flag-only.

    >>> from argoparse import arguments
    >>> source = arguments.string("source").with_description("File to read")
    >>> files = arguments.string("files").variadic(min=1)
"""
from . import primitives
from .params import Kind, SingleParam


def _make(name, primitive, /):
    return SingleParam(Kind.ARGUMENT, name, primitive)


def string(name, /):
    return _make(name, primitives.STRING)


def integer(name, /):
    return _make(name, primitives.INTEGER)


def float(name, /):
    return _make(name, primitives.FLOAT)


def date(name, /):
    return _make(name, primitives.DATE)


def redacted(name, /):
    return _make(name, primitives.REDACTED)


def choice(name, choices, /):
    if isinstance(choices, str):
        raise TypeError("choice() 'choices' must be an iterable of strings, not a string")
    return _make(name, primitives.choice((label, label) for label in choices))


def choice_with_value(name, pairs, /):
    return _make(name, primitives.choice(pairs))


none = _make("__none__", primitives.NONE)


__all__ = (
    "string",
    "integer",
    "float",
    "date",
    "redacted",
    "choice",
    "choice_with_value",
    "none",
)
