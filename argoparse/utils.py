"""
Argoparse utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the primitive, param and command layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level params/commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated parse closures for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with
    fresh copies for containers, so params and commands stay immutable from the outside.

- pluralize(text) / quantify(count, text)
  • Best-effort English pluralization used by arity messages ("at least 2 values").

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> quantify(1, "value"), quantify(3, "value")
    ('1 value', '3 values')
"""
import builtins
import functools
import re
from collections import defaultdict
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used wherever None is a legitimate user value (an optional param decodes to
    None when absent), so "not provided" needs its own marker.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable and a process-wide singleton.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - @rename(name)          -> decorator

    Raises
    - TypeError on wrong arity, a non-callable target or a non-string name.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values so callers cannot mutate backing state.

    - tuple (named tuples included): returned as-is.
    - other Sequence (non-string): new list.
    - Mapping: new dict with processed values.
    - Set: new set.
    - anything else: returned as-is.
    """
    if isinstance(object, tuple):
        return object
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private backing attribute "_{name}".

    Containers are copied on every read (see _immortalize).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def pluralize(text, /):
    """
    Best-effort English pluralizer for the last word of a phrase.

    Covers the regular patterns (s/sh/ch/x/z → +es, consonant+y → -ies) and
    preserves the casing of the word and any surrounding whitespace.

    Examples
    - pluralize("value")       -> "values"
    - pluralize("occurrence")  -> "occurrences"
    - pluralize("ERROR")       -> "ERRORS"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")

    if not (match := re.search(r'(\S+)(\s*)$', text)):
        return text

    head, last, trail = text[:match.start(1)], match.group(1), match.group(2)
    lower = last.lower()

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if last.isupper():
        plural = plural.upper()
    elif last[:1].isupper():
        plural = plural[:1].upper() + plural[1:]

    return head + plural + trail


def quantify(count, text, /):
    """
    Render "<count> <text>" with the noun pluralized unless count is exactly one.
    """
    return f"{count} {text if count == 1 else pluralize(text)}"


_PALETTE = {
    # help sections
    "section-title": "bold #FFFFFF",
    "usage": "bold #36C5F0",
    "description": "#9CA3AF",

    # names
    "flag-name": "bold #22C55E",
    "argument-name": "bold #00E6FF",
    "subcommand-name": "bold #36C5F0",
    "type-name": "#FFD600",

    # faults and version
    "error-title": "bold #FF4DA6",
    "error-message": "#C8C8D0",
    "version": "bold #FF4D94",
}


def palette():
    """
    Return the style palette, merged with the host's __styles__ mapping when
    one is defined in __main__. Unknown keys resolve to an empty style.
    """
    return defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: identity checks must not treat it as None.
- Typical pattern: value = coalesce(user_value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "quantify",
    "palette",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
