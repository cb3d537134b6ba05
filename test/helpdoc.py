"""
Help document tests (building from commands, plain and styled rendering).

Conventions
- Test method names follow CamelCase per project convention.
- Expected layouts are spelled out in full so spacing regressions are visible.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argoparse import arguments, flags, help_for_path, make
from argoparse.helpdoc import HelpDoc, format_help_doc, format_version, render_help_doc, render_version


def greet():
    return make("greet", {
        "name": arguments.string("name").with_description("Who to greet"),
        "times": arguments.integer("times").optional().with_description("Repeat count"),
        "shout": flags.boolean("shout").with_alias("s").with_description("Use capitals"),
        "lang": flags.choice("lang", ["en", "fr"]).with_default("en").with_description("Language"),
    }, description="Say hello")


class TestHelpDoc(TestCase):
    """Help layout for flags, arguments and subcommands."""

    def testFullLayout(self):
        self.assertEqual(format_help_doc(greet().build_help_doc(("greet",))), "\n".join((
            "DESCRIPTION",
            "  Say hello",
            "",
            "USAGE",
            "  greet [flags] <name> [<times>]",
            "",
            "ARGUMENTS",
            "  name string    Who to greet",
            "  times integer    Repeat count (optional)",
            "",
            "FLAGS",
            "  --shout, -s    Use capitals",
            "  --lang choice    Language",
        )))

    def testSubcommandsAndVariadics(self):
        app = make("app").with_subcommands([
            make("copy", {
                "files": arguments.string("files").variadic().with_description("Files to copy"),
                "force": flags.boolean("force").with_alias("force-it"),
            }, description="Copy files"),
            make("list"),
        ])
        self.assertEqual(format_help_doc(app.build_help_doc()), "\n".join((
            "USAGE",
            "  app <subcommand> [flags]",
            "",
            "SUBCOMMANDS",
            "  copy    Copy files",
            "  list    ",
        )))
        self.assertEqual(format_help_doc(help_for_path(app, ("app", "copy"))), "\n".join((
            "DESCRIPTION",
            "  Copy files",
            "",
            "USAGE",
            "  app copy [flags] <files...>",
            "",
            "ARGUMENTS",
            "  files... string    Files to copy",
            "",
            "FLAGS",
            "  --force, --force-it    ",
        )))

    def testMetavarReplacesType(self):
        tool = make("tool", {"out": flags.string("out").with_metavar("PATH").with_description("Target")})
        self.assertIn("  --out PATH    Target", format_help_doc(tool.build_help_doc()))

    def testStyledRenderingKeepsCharacters(self):
        doc = greet().build_help_doc(("greet",))
        plain = render_help_doc(doc, colorful=False)
        styled = render_help_doc(doc)
        self.assertEqual(plain.plain, format_help_doc(doc))
        self.assertEqual(styled.plain, format_help_doc(doc))
        self.assertFalse(plain.spans)
        self.assertTrue(styled.spans)

    def testMinimalDoc(self):
        self.assertEqual(format_help_doc(HelpDoc("", "tool [flags]")), "USAGE\n  tool [flags]")

    def testVersion(self):
        self.assertEqual(format_version("tool", "1.2.3"), "tool v1.2.3")
        self.assertEqual(render_version("tool", "1.2.3", colorful=False).plain, "tool v1.2.3")


if __name__ == "__main__":
    unittest.main()
