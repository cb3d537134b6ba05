"""
Argoparse lexer: raw argv → token stream.

Tokens (immutable)
- LongOption(name, raw, value=None): "--name" or "--name=value" (split at the first "=").
- ShortOption(flag, raw, value=None): one per character of a "-xyz" cluster.
- Value(value): anything else, including a lone "-".

Rules, in order
1. Everything after the first literal "--" becomes trailing_operands, verbatim.
2. "--name[=value]" is a LongOption.
3. "-xyz" yields one bare ShortOption per character; "-xyz=value" does the same but
   only the last character before "=" carries the value.
4. Everything else is a Value.
"""
from typing import NamedTuple


class LongOption(NamedTuple):
    name: str
    raw: str
    value: str | None = None


class ShortOption(NamedTuple):
    flag: str
    raw: str
    value: str | None = None


class Value(NamedTuple):
    value: str


class LexResult(NamedTuple):
    tokens: tuple
    trailing_operands: tuple = ()


def is_flag_token(token, /):
    return isinstance(token, LongOption | ShortOption)


def flag_name(token, /):
    """
    the bare name of a flag token ("verbose" for --verbose, "v" for -v).
    """
    return token.name if isinstance(token, LongOption) else token.flag


def _tokenize(arg):
    if arg.startswith("--"):
        name, equals, value = arg[2:].partition("=")
        yield LongOption(name, arg, value if equals else None)
    elif arg.startswith("-") and len(arg) > 1:
        cluster, equals, value = arg[1:].partition("=")
        if not cluster:
            # "-=value" names no flag at all
            yield Value(arg)
            return
        for index, flag in enumerate(cluster, 1):
            if equals and index == len(cluster):
                yield ShortOption(flag, f"-{flag}", value)
            else:
                yield ShortOption(flag, f"-{flag}")
    else:
        yield Value(arg)


def lex(argv, /):
    """
    Tokenize argv (an iterable of strings) into a LexResult.

    Raises
    - TypeError: when an item of argv is not a string.
    """
    argv = list(argv)
    if not all(isinstance(arg, str) for arg in argv):
        raise TypeError("lex() argument must be an iterable of strings")

    try:
        end = argv.index("--")
    except ValueError:
        args, trailing = argv, []
    else:
        args, trailing = argv[:end], argv[end + 1:]

    tokens = tuple(token for arg in args for token in _tokenize(arg))
    return LexResult(tokens, tuple(trailing))


__all__ = (
    "LongOption",
    "ShortOption",
    "Value",
    "LexResult",
    "is_flag_token",
    "flag_name",
    "lex",
)
