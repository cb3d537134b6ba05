"""
Argoparse flag constructors: named inputs (--name / -n).

Each constructor returns a SingleParam of kind flag (or a param built on one), ready
for the shared combinators (optional, with_default, with_alias, variadic, ...).

    >>> from argoparse import flags
    >>> verbose = flags.boolean("verbose").with_alias("v").with_description("Chatty output")
    >>> env = flags.choice("env", ["dev", "prod"]).with_default("dev")
    >>> tags = flags.string("tag").variadic()
"""
from . import primitives
from .params import Kind, SingleParam


def _make(name, primitive, /):
    return SingleParam(Kind.FLAG, name, primitive)


def string(name, /):
    return _make(name, primitives.STRING)


def boolean(name, /):
    """
    A boolean flag: absent → False, bare → True, or an explicit literal
    (true/false/yes/no/on/off/y/n/1/0, any case).
    """
    return _make(name, primitives.BOOLEAN)


def integer(name, /):
    return _make(name, primitives.INTEGER)


def float(name, /):
    return _make(name, primitives.FLOAT)


def date(name, /):
    return _make(name, primitives.DATE)


def redacted(name, /):
    """
    A string flag whose value is wrapped in primitives.Redacted.
    """
    return _make(name, primitives.REDACTED)


def choice(name, choices, /):
    """
    A flag accepting one of the given labels; decodes to the label itself.
    """
    if isinstance(choices, str):
        raise TypeError("choice() 'choices' must be an iterable of strings, not a string")
    return _make(name, primitives.choice((label, label) for label in choices))


def choice_with_value(name, pairs, /):
    """
    A flag accepting one of the labels of (label, value) pairs; decodes to the value.
    """
    return _make(name, primitives.choice(pairs))


def key_value_pair(name, /):
    """
    A repeatable key=value flag merged into one dict (at least one occurrence).

        --define a=1 --define b=2   →   {"a": "1", "b": "2"}
    """
    return _make(name, primitives.KEY_VALUE_PAIR).variadic(min=1).map(_merge)


def _merge(pairs):
    merged = {}
    for pair in pairs:
        merged.update(pair)
    return merged


none = _make("__none__", primitives.NONE)
"""
Placeholder flag whose primitive rejects every value.
"""


__all__ = (
    "string",
    "boolean",
    "integer",
    "float",
    "date",
    "redacted",
    "choice",
    "choice_with_value",
    "key_value_pair",
    "none",
)
