"""
Argoparse primitives: leaf-level string decoders.

Overview
- Primitive: a sealed value type pairing a PrimitiveTag with a decoder function.
  Primitive.parse(raw) returns the decoded value or raises ValueError with a
  human-readable "expected X, got Y" message; that message later becomes the
  'expected' field of an InvalidValueError.
- Built-in instances: BOOLEAN, STRING, INTEGER, FLOAT, DATE, REDACTED,
  KEY_VALUE_PAIR, NONE.
- choice(pairs): build a Choice primitive from ordered (label, value) pairs.
- Redacted: wrapper that keeps secrets out of reprs, logs and tracebacks.

Type names
- Each primitive exposes a stable 'typename' used by the help renderer
  (for example "integer", "number", "key=value").

Notes
- Decoders are pure functions: no state, no I/O, safe to share across threads.
"""
import datetime
import math
from enum import StrEnum
from types import MappingProxyType
from typing import final

from .utils import rename


class PrimitiveTag(StrEnum):
    BOOLEAN = "Boolean"
    STRING = "String"
    INTEGER = "Integer"
    FLOAT = "Float"
    DATE = "Date"
    CHOICE = "Choice"
    REDACTED = "Redacted"
    KEY_VALUE_PAIR = "KeyValuePair"
    NONE = "None"


_TYPENAMES = MappingProxyType({
    PrimitiveTag.BOOLEAN: "boolean",
    PrimitiveTag.STRING: "string",
    PrimitiveTag.INTEGER: "integer",
    PrimitiveTag.FLOAT: "number",
    PrimitiveTag.DATE: "date",
    PrimitiveTag.CHOICE: "choice",
    PrimitiveTag.REDACTED: "string",
    PrimitiveTag.KEY_VALUE_PAIR: "key=value",
    PrimitiveTag.NONE: "none",
})

_TRUE_LITERALS = frozenset(("true", "1", "y", "yes", "on"))
_FALSE_LITERALS = frozenset(("false", "0", "n", "no", "off"))


def is_boolean_literal(value, /):
    """
    Tell whether a raw token is one of the accepted boolean spellings (any case).
    """
    return value.lower() in _TRUE_LITERALS | _FALSE_LITERALS


@final
class Redacted:
    """
    Opaque holder for a sensitive string.

    repr() and str() never show the secret; call value() to reveal it.
    """
    __slots__ = ("_value",)

    def __init__(self, value, /):
        if not isinstance(value, str):
            raise TypeError("redacted value must be a string")
        self._value = value

    def value(self):
        return self._value

    def __repr__(self):
        return "<redacted>"

    __str__ = __repr__

    def __eq__(self, other):
        if not isinstance(other, Redacted):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash((Redacted, self._value))

    def __init_subclass__(cls, **options):
        raise TypeError("type 'Redacted' is not an acceptable base type")


@final
class Primitive:
    """
    A leaf decoder: raw command-line string → typed value.

    Attributes
    - tag: PrimitiveTag discriminating the decoder family.
    - typename: label shown in help output (derived from the tag).

    Contract
    - parse(raw) returns the decoded value, or raises ValueError whose message
      is ready to be shown to the user.
    """
    __slots__ = ("_tag", "_decoder")

    def __init__(self, tag, decoder, /):
        if not isinstance(tag, PrimitiveTag):
            raise TypeError("primitive 'tag' must be a primitive-tag")
        if not callable(decoder):
            raise TypeError("primitive 'decoder' must be callable")
        self._tag = tag
        self._decoder = decoder

    @property
    def tag(self):
        return self._tag

    @property
    def typename(self):
        return _TYPENAMES.get(self._tag, "value")

    @property
    def is_boolean(self):
        return self._tag is PrimitiveTag.BOOLEAN

    def parse(self, raw, /):
        return self._decoder(raw)

    def __repr__(self):
        return f"primitive({self._tag.value})"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'Primitive' is not an acceptable base type")


@rename("boolean")
def _boolean(value):
    if value.lower() in _TRUE_LITERALS:
        return True
    if value.lower() in _FALSE_LITERALS:
        return False
    raise ValueError(f'Expected boolean (true/false/yes/no/on/off/1/0), got "{value}"')


@rename("integer")
def _integer(value):
    # Python digit separators ("1_000") are not valid command-line numbers
    if "_" in value:
        raise ValueError(f'Expected integer, got "{value}"')
    try:
        return int(value)
    except ValueError:
        pass
    # Accept integral spellings such as "1e3" or "2.0", like a numeric literal would
    try:
        number = float(value)
    except ValueError:
        number = math.nan
    if not math.isfinite(number) or not number.is_integer():
        raise ValueError(f'Expected integer, got "{value}"')
    return int(number)


@rename("number")
def _float(value):
    if "_" in value:
        raise ValueError(f'Expected number, got "{value}"')
    try:
        number = float(value)
    except ValueError:
        number = math.nan
    if not math.isfinite(number):
        raise ValueError(f'Expected number, got "{value}"')
    return number


@rename("date")
def _date(value):
    try:
        return datetime.datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f'Expected valid date, got "{value}"') from None


@rename("key_value_pair")
def _key_value_pair(value):
    index = value.find("=")
    if index <= 0 or index == len(value) - 1:
        raise ValueError(f'Expected key=value format, got "{value}"')
    return {value[:index]: value[index + 1:]}


@rename("none")
def _none(value):
    raise ValueError("This option does not accept values")


BOOLEAN = Primitive(PrimitiveTag.BOOLEAN, _boolean)
STRING = Primitive(PrimitiveTag.STRING, str)
INTEGER = Primitive(PrimitiveTag.INTEGER, _integer)
FLOAT = Primitive(PrimitiveTag.FLOAT, _float)
DATE = Primitive(PrimitiveTag.DATE, _date)
REDACTED = Primitive(PrimitiveTag.REDACTED, Redacted)
KEY_VALUE_PAIR = Primitive(PrimitiveTag.KEY_VALUE_PAIR, _key_value_pair)
NONE = Primitive(PrimitiveTag.NONE, _none)


def choice(pairs, /):
    """
    Build a Choice primitive from ordered (label, value) pairs.

    Unknown labels fail with every valid label listed in declaration order,
    joined by " | " (for example: Expected dev | prod, got "qa").

    Raises
    - TypeError: if a label is not a string or a pair is malformed.
    - ValueError: if no pairs are given or a label is repeated.
    """
    mapping = {}
    for pair in pairs:
        try:
            label, value = pair
        except (TypeError, ValueError):
            raise TypeError("choice pairs must be (label, value) tuples") from None
        if not isinstance(label, str):
            raise TypeError("choice labels must be strings")
        if label in mapping:
            raise ValueError(f"choice label {label!r} is repeated")
        mapping[label] = value
    if not mapping:
        raise ValueError("choice requires at least one label")

    valid = " | ".join(mapping)

    @rename("choice")
    def decoder(value):
        try:
            return mapping[value]
        except KeyError:
            raise ValueError(f'Expected {valid}, got "{value}"') from None

    return Primitive(PrimitiveTag.CHOICE, decoder)


__all__ = (
    "PrimitiveTag",
    "Primitive",
    "Redacted",
    "is_boolean_literal",
    "choice",

    # Constants
    "BOOLEAN",
    "STRING",
    "INTEGER",
    "FLOAT",
    "DATE",
    "REDACTED",
    "KEY_VALUE_PAIR",
    "NONE",
)
