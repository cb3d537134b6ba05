"""
Commands module behavioral tests (declaration, parsing, dispatch, run_with).

Scope
- Validate handler dispatch with decoded config, nested and array shapes included.
- Validate subcommand dispatch (only the deepest handler runs).
- Validate help, version and error output and the returned exit status.
- Validate declaration-time duplicate flag detection and immutability of commands.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through rich consoles writing to in-memory buffers.
"""

from __future__ import annotations

import asyncio
import copy
import io
import logging
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argoparse import (
    Command,
    DuplicateOptionError,
    ShowHelp,
    UserError,
    arguments,
    flags,
    make,
    run,
    run_with,
)
from argoparse.lexer import lex
from argoparse.parser import parse_args


def capture():
    return Console(file=io.StringIO(), width=200, soft_wrap=True, highlight=False)


class Harness:
    """Run a command against argv with captured output."""

    def __init__(self, command):
        self.command = command
        self.stdout = capture()
        self.stderr = capture()

    def __call__(self, *argv):
        return run_with(self.command, argv, version="1.0.0", stdout=self.stdout, stderr=self.stderr)

    @property
    def out(self):
        return self.stdout.file.getvalue()

    @property
    def err(self):
        return self.stderr.file.getvalue()


class TestCommandHandlers(TestCase):
    """Decoded config reaches the handler."""

    def testHandlerReceivesConfig(self):
        calls = []
        greet = make("greet", {
            "name": arguments.string("name"),
            "shout": flags.boolean("shout").with_alias("s"),
            "times": flags.integer("times").with_default(1),
        }, calls.append)

        self.assertEqual(Harness(greet)("ada", "-s", "--times", "3"), 0)
        self.assertEqual(calls, [{"name": "ada", "shout": True, "times": 3}])

    def testNestedAndArrayConfig(self):
        calls = []
        tool = make("tool", {
            "db": {"host": flags.string("host"), "port": flags.integer("port").with_default(5432)},
            "pair": [arguments.string("left"), arguments.string("right")],
        }, calls.append)

        self.assertEqual(Harness(tool)("a", "b", "--host", "localhost"), 0)
        self.assertEqual(calls, [{"db": {"host": "localhost", "port": 5432}, "pair": ["a", "b"]}])

    def testFlagKinds(self):
        calls = []
        tool = make("tool", {
            "env": flags.choice("env", ["dev", "prod"]),
            "level": flags.choice_with_value("level", [("low", 1), ("high", 9)]),
            "ratio": flags.float("ratio"),
            "define": flags.key_value_pair("define"),
            "token": flags.redacted("token"),
            "tags": flags.string("tag").variadic(),
        }, calls.append)

        status = Harness(tool)(
            "--env", "prod", "--level=high", "--ratio", "0.5",
            "--define", "a=1", "--define", "b=2", "--token", "s3cret", "--tag", "x", "--tag", "y",
        )
        self.assertEqual(status, 0)
        config, = calls
        self.assertEqual(config["env"], "prod")
        self.assertEqual(config["level"], 9)
        self.assertEqual(config["ratio"], 0.5)
        self.assertEqual(config["define"], {"a": "1", "b": "2"})
        self.assertEqual(config["token"].value(), "s3cret")
        self.assertEqual(config["tags"], ["x", "y"])

    def testBundledBooleans(self):
        tool = make("tool", {"a": flags.boolean("a"), "b": flags.boolean("b"), "c": flags.boolean("c")})
        self.assertEqual(tool.parse(parse_args(lex(["-abc"]), tool)), {"a": True, "b": True, "c": True})

        calls = []
        self.assertEqual(Harness(tool.with_handler(calls.append))("-ac"), 0)
        self.assertEqual(calls, [{"a": True, "b": False, "c": True}])

    def testAwaitableHandlerInsideRunningLoopRejected(self):
        async def handler(config):
            pass

        harness = Harness(make("tool", None, handler))

        async def main():
            return harness()

        with self.assertRaises(RuntimeError):
            asyncio.run(main())

    def testAwaitableHandlerIsDriven(self):
        calls = []

        async def handler(config):
            calls.append(config["name"])

        self.assertEqual(Harness(make("tool", {"name": arguments.string("name")}, handler))("ada"), 0)
        self.assertEqual(calls, ["ada"])

    def testUserErrorReported(self):
        def handler(config):
            raise UserError(RuntimeError("disk full"))

        harness = Harness(make("tool", None, handler))
        self.assertEqual(harness(), 1)
        self.assertEqual(harness.err, "\nERROR\n  disk full\n")

    def testOtherExceptionsPropagate(self):
        def handler(config):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            Harness(make("tool", None, handler))()


class TestCommandFailures(TestCase):
    """Parse failures print help then errors and skip the handler."""

    def setUp(self):
        self.calls = []
        self.tool = make("tool", {
            "name": arguments.string("name"),
            "count": flags.integer("count").optional(),
        }, self.calls.append)

    def testMissingArgument(self):
        harness = Harness(self.tool)
        self.assertEqual(harness(), 1)
        self.assertEqual(self.calls, [])
        self.assertIn("USAGE\n  tool [flags] <name>", harness.out)
        self.assertEqual(harness.err, "\nERROR\n  Missing required argument: name\n")

    def testInvalidInteger(self):
        harness = Harness(self.tool)
        self.assertEqual(harness("ada", "--count", "many"), 1)
        self.assertEqual(self.calls, [])
        self.assertIn('Invalid value for flag --count: "many"', harness.err)

    def testMissingFlag(self):
        harness = Harness(make("tool", {"name": flags.string("name")}, self.calls.append))
        self.assertEqual(harness(), 1)
        self.assertIn("Missing required flag: --name", harness.err)

    def testUnrecognizedFlagsCollected(self):
        harness = Harness(self.tool)
        self.assertEqual(harness("ada", "--cuont", "1", "--zzzzzz"), 1)
        self.assertEqual(self.calls, [])
        self.assertIn("\nERRORS\n  Unrecognized flag: --cuont in command tool", harness.err)
        self.assertIn("Did you mean this?\n    --count", harness.err)

    def testBadLogLevel(self):
        harness = Harness(self.tool)
        self.assertEqual(harness("ada", "--log-level", "loud"), 1)
        self.assertIn("Invalid value for flag --log-level", harness.err)

    def testBadLogLevelShowsSelectedSubcommandHelp(self):
        app = make("app").with_subcommands([make("build", {"target": arguments.string("target")})])
        harness = Harness(app)
        self.assertEqual(harness("build", "--help", "--log-level", "bogus"), 1)
        self.assertIn("USAGE\n  app build [flags] <target>", harness.out)
        self.assertIn("Invalid value for flag --log-level", harness.err)


class TestBuiltins(TestCase):
    """--help, --version and --log-level."""

    def testHelpSkipsHandler(self):
        calls = []
        harness = Harness(make("tool", {"name": arguments.string("name")}, calls.append, description="Does things"))
        self.assertEqual(harness("-h"), 0)
        self.assertEqual(calls, [])
        self.assertTrue(harness.out.startswith("DESCRIPTION\n  Does things\n\nUSAGE\n  tool [flags] <name>"))
        self.assertEqual(harness.err, "")

    def testHelpWinsOverErrors(self):
        harness = Harness(make("tool", {"name": arguments.string("name")}))
        self.assertEqual(harness("--nope", "--help"), 0)
        self.assertEqual(harness.err, "")

    def testVersion(self):
        harness = Harness(make("tool"))
        self.assertEqual(harness("--version"), 0)
        self.assertEqual(harness.out, "tool v1.0.0\n")

    def testLogLevelAppliedToRootLogger(self):
        root = logging.getLogger()
        self.addCleanup(root.setLevel, root.level)
        self.assertEqual(Harness(make("tool", None, lambda config: None))("--log-level", "debug"), 0)
        self.assertEqual(root.level, logging.DEBUG)

    def testLogLevelNoneSilences(self):
        root = logging.getLogger()
        self.addCleanup(root.setLevel, root.level)
        Harness(make("tool", None, lambda config: None))("--log-level=none")
        self.assertGreater(root.level, logging.CRITICAL)


class TestSubcommands(TestCase):
    """Routing to subcommands and their handlers."""

    def setUp(self):
        self.calls = []
        self.app = make("app", {"verbose": flags.boolean("verbose")}, lambda config: self.calls.append(("app", config)))
        self.app = self.app.with_subcommands([
            make("build", {"target": arguments.string("target")}, lambda config: self.calls.append(("build", config))),
            make("clean"),
        ])

    def testOnlyChildHandlerRuns(self):
        self.assertEqual(Harness(self.app)("build", "web"), 0)
        self.assertEqual(self.calls, [("build", {"target": "web"})])

    def testParentHandlerWithoutSubcommand(self):
        self.assertEqual(Harness(self.app)("--verbose"), 0)
        self.assertEqual(self.calls, [("app", {"verbose": True})])

    def testParentFlagAfterSubcommandName(self):
        result = self.app.parse(parse_args(lex(["build", "--verbose", "web"]), self.app))
        self.assertEqual(result, {
            "verbose": True,
            "_subcommand": {"name": "build", "result": {"target": "web"}},
        })

    def testChildWithoutHandlerShowsHelp(self):
        harness = Harness(self.app)
        self.assertEqual(harness("clean"), 0)
        self.assertEqual(self.calls, [])
        self.assertTrue(harness.out.startswith("USAGE\n  app clean [flags]"))

    def testRootWithoutHandlerShowsHelp(self):
        harness = Harness(make("app").with_subcommands([make("one", None, lambda config: None)]))
        self.assertEqual(harness(), 0)
        self.assertIn("SUBCOMMANDS\n  one", harness.out)

    def testHelpForSubcommand(self):
        harness = Harness(self.app)
        self.assertEqual(harness("build", "--help"), 0)
        self.assertIn("USAGE\n  app build [flags] <target>", harness.out)

    def testUnknownSubcommand(self):
        harness = Harness(make("app").with_subcommands([make("build")]))
        self.assertEqual(harness("bulid"), 1)
        self.assertIn('Unknown subcommand "bulid" for "app"', harness.err)

    def testHandleRaisesShowHelp(self):
        with self.assertRaises(ShowHelp) as context:
            make("app").handle({}, ("app",))
        self.assertEqual(context.exception.command_path, ("app",))


class TestCommandDeclaration(TestCase):
    """Declaration checks and immutable combinators."""

    def testDuplicateFlagsRejected(self):
        parent = make("app", {"verbose": flags.boolean("verbose")})
        with self.assertRaises(DuplicateOptionError) as context:
            parent.with_subcommands([make("sub", {"loud": flags.boolean("verbose")})])
        self.assertEqual(context.exception, DuplicateOptionError("verbose", "app", "sub"))

    def testAliasesDoNotCountAsDuplicates(self):
        parent = make("app", {"verbose": flags.boolean("verbose").with_alias("v")})
        parent.with_subcommands([make("sub", {"version": flags.string("value").with_alias("v")})])

    def testCombinatorsReturnNewCommands(self):
        base = make("tool")
        described = base.with_description("Does things")
        handled = described.with_handler(print)
        self.assertIsNone(base.description)
        self.assertIsNone(base.handler)
        self.assertEqual(handled.description, "Does things")
        self.assertIs(handled.handler, print)
        self.assertEqual(copy.replace(handled, name="other").name, "other")

    def testInvalidDeclarations(self):
        with self.assertRaises(ValueError):
            make("has space")
        with self.assertRaises(TypeError):
            make("tool", None, "not callable")
        with self.assertRaises(TypeError):
            make("tool", ["not", "a", "mapping"])
        with self.assertRaises(ValueError):
            make("app").with_subcommands([make("x"), make("x")])

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Custom", (Command,), {})

    def testRepr(self):
        self.assertEqual(repr(make("tool")), "command(name='tool', description=None, subcommands=())")


class TestRun(TestCase):
    """run() reads sys.argv and exits on failure."""

    def testExitsWithStatus(self):
        stdout, stderr = capture(), capture()
        with mock.patch.object(sys, "argv", ["tool"]), \
                mock.patch("argoparse.commands.console", stdout), \
                mock.patch("argoparse.commands.error_console", stderr):
            with self.assertRaises(SystemExit) as context:
                run(make("tool", {"name": arguments.string("name")}, print), version="1.0.0")
        self.assertEqual(context.exception.code, 1)

    def testReturnsOnSuccess(self):
        calls = []
        with mock.patch.object(sys, "argv", ["tool", "ada"]):
            run(make("tool", {"name": arguments.string("name")}, calls.append), version="1.0.0")
        self.assertEqual(calls, [{"name": "ada"}])


if __name__ == "__main__":
    unittest.main()
