"""
Argoparse help documents.

Overview
- HelpDoc: the static shape of one command as seen from a command path
  (description, usage line, flags, positional arguments, subcommands).
- format_help_doc(doc): plain text rendering.
- render_help_doc(doc, colorful=True): the same characters as a rich Text, styled
  with utils.palette() when colorful.
- format_version(name, version): "<name> v<version>".

Layout
    DESCRIPTION
      <description>

    USAGE
      <path> [<subcommand>] [flags] <arg> [<optional>] <variadic...>

    ARGUMENTS
      <name>[...] <type>    <description>[ (optional)]

    FLAGS
      --<name>, -<alias> [<type>]    <description>

    SUBCOMMANDS
      <name>    <description>

Sections without content are omitted, and no blank line trails the last section.
"""
from typing import NamedTuple

from rich.text import Text

from .utils import palette


class FlagDoc(NamedTuple):
    name: str
    aliases: tuple
    type: str
    description: str | None
    required: bool


class ArgDoc(NamedTuple):
    name: str
    type: str
    description: str | None
    required: bool
    variadic: bool


class SubcommandDoc(NamedTuple):
    name: str
    description: str


class HelpDoc(NamedTuple):
    description: str
    usage: str
    flags: tuple = ()
    args: tuple = ()
    subcommands: tuple = ()


def _lines(doc):
    """
    yield each output line as a list of (text, style-key) fragments.
    """
    if doc.description:
        yield [("DESCRIPTION", "section-title")]
        yield [("  ", ""), (doc.description, "description")]
        yield []

    yield [("USAGE", "section-title")]
    yield [("  ", ""), (doc.usage, "usage")]
    yield []

    if doc.args:
        yield [("ARGUMENTS", "section-title")]
        for arg in doc.args:
            yield [
                ("  ", ""),
                (arg.name + ("..." if arg.variadic else ""), "argument-name"),
                (" ", ""),
                (arg.type, "type-name"),
                ("    ", ""),
                ((arg.description or "") + ("" if arg.required else " (optional)"), "description"),
            ]
        yield []

    if doc.flags:
        yield [("FLAGS", "section-title")]
        for flag in doc.flags:
            line = [("  ", ""), (", ".join((f"--{flag.name}", *flag.aliases)), "flag-name")]
            if flag.type != "boolean":
                line += [(" ", ""), (flag.type, "type-name")]
            line += [("    ", ""), (flag.description or "", "description")]
            yield line
        yield []

    if doc.subcommands:
        yield [("SUBCOMMANDS", "section-title")]
        for subcommand in doc.subcommands:
            yield [("  ", ""), (subcommand.name, "subcommand-name"), ("    ", ""), (subcommand.description, "description")]
        yield []


def _trimmed(doc):
    lines = list(_lines(doc))
    if lines and not lines[-1]:
        lines.pop()
    return lines


def format_help_doc(doc, /):
    return "\n".join("".join(text for text, _ in line) for line in _trimmed(doc))


def render_help_doc(doc, /, *, colorful=True):
    styles = palette() if colorful else None
    rendered = Text()
    for number, line in enumerate(_trimmed(doc)):
        if number:
            rendered.append("\n")
        for text, style in line:
            rendered.append(text, styles[style] if styles and style else "")
    return rendered


def format_version(name, version, /):
    return f"{name} v{version}"


def render_version(name, version, /, *, colorful=True):
    return Text(format_version(name, version), palette()["version"] if colorful else "")


__all__ = (
    "FlagDoc",
    "ArgDoc",
    "SubcommandDoc",
    "HelpDoc",
    "format_help_doc",
    "render_help_doc",
    "format_version",
    "render_version",
)
