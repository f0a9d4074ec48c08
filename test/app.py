"""
App behavioral tests (registration, resolution, token scanning, dispatch).

Scope
- Validate command resolution by ident/alias, default routing and routing faults.
- Validate long and abbreviated flag scanning, including the containment quirks.
- Validate value lookahead, duplicate detection and positional ordering.
- Validate the run() boundary: exit status 1 in shell mode, raising otherwise.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (App, Command, Flag, FlagKind, Context helpers).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from akita import (
    App,
    Command,
    Flag,
    FlagKind,
    Present,
    Value,
    EmptyRegistryError,
    MissingCommandError,
    UnknownCommandError,
    MixedAbbreviationError,
    DuplicatedFlagError,
    MissingFlagValueError,
    FaultCode,
)


def _recorder():
    calls = []

    def handler(state, context):
        calls.append((state, context))

    return handler, calls


class TestRegistration(TestCase):
    """Behavioral tests for the command table."""

    def testRegisterIsChainableAndOrdered(self):
        handler, _ = _recorder()
        put = Command("put", handler, "p")
        get = Command("get", handler, "g")
        app = App(name="akita").register(put).register(get)
        self.assertEqual([command.ident for command in app.commands], ["put", "get"])
        self.assertIs(put.app, app)

    def testRegisterRejectsDuplicateIdent(self):
        handler, _ = _recorder()
        app = App(name="akita").register(Command("put", handler))
        with self.assertRaises(ValueError):
            app.register(Command("put", handler))

    def testRegisterRejectsAliasCollidingWithIdent(self):
        handler, _ = _recorder()
        app = App(name="akita").register(Command("p", handler))
        with self.assertRaises(ValueError):
            app.register(Command("put", handler, "p"))

    def testRegisterRejectsSecondDefault(self):
        handler, _ = _recorder()
        app = App(name="akita").register(Command("put", handler), default=True)
        with self.assertRaises(ValueError):
            app.register(Command("get", handler), default=True)

    def testRegisterRejectsCommandOwnedByAnotherApp(self):
        handler, _ = _recorder()
        put = Command("put", handler)
        App(name="one").register(put)
        with self.assertRaises(ValueError):
            App(name="two").register(put)

    def testRegisterRejectsNonCommand(self):
        with self.assertRaises(TypeError):
            App(name="akita").register("put")

    def testCommandDecoratorRegisters(self):
        app = App(name="akita")

        @app.command("get", "g", default=True)
        def get(state, context):
            pass

        self.assertIsInstance(get, Command)
        self.assertIs(app.default, get)
        self.assertEqual(app.commands[0].alias, "g")


class TestResolution(TestCase):
    """Behavioral tests for command selection."""

    def setUp(self):
        self.handler, self.calls = _recorder()
        self.app = App("state", "akita", shell=False)
        self.app.register(Command("put", self.handler, "p"))
        self.app.register(Command("get", self.handler, "g"))

    def testIdentSelectsCommand(self):
        command, context = self.app.parse(["get", "doc"])
        self.assertEqual(command.ident, "get")
        self.assertEqual(context.positionals, ["doc"])

    def testAliasSelectsCommand(self):
        command, _ = self.app.parse(["p"])
        self.assertEqual(command.ident, "put")

    def testFirstRegisteredMatchWins(self):
        first, _ = _recorder()
        app = App(name="akita", shell=False)
        app.register(Command("list", first, "l"))
        app.register(Command("log", first))
        command, _ = app.parse(["l"])
        self.assertEqual(command.ident, "list")

    def testEmptyInputWithoutDefaultRaises(self):
        with self.assertRaises(MissingCommandError) as raised:
            self.app.parse([])
        self.assertIn("command", raised.exception.message)
        self.assertIs(raised.exception.options["code"], FaultCode.MISSING_COMMAND)

    def testEmptyInputRoutesToDefault(self):
        app = App(name="akita", shell=False)
        app.register(Command("put", self.handler))
        app.register(Command("show", self.handler), default=True)
        command, context = app.parse([])
        self.assertEqual(command.ident, "show")
        self.assertEqual(context.positionals, [])

    def testUnknownCommandRaises(self):
        with self.assertRaises(UnknownCommandError) as raised:
            self.app.parse(["pt", "doc"])
        self.assertEqual(raised.exception.options["token"], "pt")
        self.assertIn("put", raised.exception.options["suggestions"])

    def testUnknownTokenRoutesAllTokensToDefault(self):
        app = App(name="akita", shell=False)
        app.register(Command("put", self.handler))
        app.register(
            Command("show", self.handler).flag(Flag("output", "o")),
            default=True,
        )
        command, context = app.parse(["mydoc", "-o", "out.txt", "other"])
        self.assertEqual(command.ident, "show")
        self.assertEqual(context.positionals, ["mydoc", "other"])
        self.assertEqual(context.get("output"), "out.txt")

    def testEmptyRegistryRaises(self):
        with self.assertRaises(EmptyRegistryError):
            App(name="akita", shell=False).parse(["put"])


class TestLongFlags(TestCase):
    """Behavioral tests for --name tokens."""

    def setUp(self):
        self.handler, _ = _recorder()
        self.app = App(name="akita", shell=False)
        self.app.register(
            Command("put", self.handler, "p")
            .flag(Flag("slug", "s", FlagKind.VALUE, "desired slug"))
            .flag(Flag("content", "c", FlagKind.VALUE, "document content"))
            .flag(Flag("reset", "r", FlagKind.SWITCH))
        )

    def testValueFlagsScenario(self):
        _, context = self.app.parse(["put", "--slug", "note", "--content", "hello"])
        self.assertEqual(context.positionals, [])
        self.assertEqual(context.get("slug"), "note")
        self.assertEqual(context.get("content"), "hello")

    def testValueIsStoredAsValue(self):
        _, context = self.app.parse(["put", "--slug", "note"])
        self.assertEqual(context.values, {"slug": Value("note")})

    def testSwitchFlagIsSetWithoutValue(self):
        _, context = self.app.parse(["put", "--reset", "file.txt"])
        self.assertTrue(context.is_set("reset"))
        self.assertIsNone(context.get("reset"))
        self.assertIs(context.values["reset"], Present)
        self.assertEqual(context.positionals, ["file.txt"])

    def testUnseenFlagIsUnset(self):
        _, context = self.app.parse(["put"])
        self.assertFalse(context.is_set("slug"))
        self.assertIsNone(context.get("slug"))

    def testMatchingUsesContainment(self):
        _, context = self.app.parse(["put", "--my-slug-here", "note"])
        self.assertEqual(context.get("slug"), "note")

    def testFirstDeclaredFlagWins(self):
        # "--slug-content" contains both names; slug is declared first
        _, context = self.app.parse(["put", "--slug-content", "note"])
        self.assertEqual(context.get("slug"), "note")
        self.assertFalse(context.is_set("content"))

    def testValueAtEndRaises(self):
        with self.assertRaises(MissingFlagValueError) as raised:
            self.app.parse(["put", "--slug"])
        self.assertEqual(raised.exception.options["token"], "--slug")
        self.assertEqual(raised.exception.options["index"], 2)

    def testValueBeforeAnotherFlagRaises(self):
        with self.assertRaises(MissingFlagValueError):
            self.app.parse(["put", "--slug", "--content", "hello"])

    def testDuplicateValueFlagRaises(self):
        with self.assertRaises(DuplicatedFlagError) as raised:
            self.app.parse(["put", "--slug", "a", "--slug", "b"])
        self.assertEqual(raised.exception.options["index"], 4)

    def testDuplicateAcrossSpellingsRaises(self):
        with self.assertRaises(DuplicatedFlagError):
            self.app.parse(["put", "--slug", "a", "-s", "b"])

    def testRepeatedSwitchIsAccepted(self):
        _, context = self.app.parse(["put", "--reset", "--reset"])
        self.assertTrue(context.is_set("reset"))

    def testUnknownDashTokenIsIgnored(self):
        _, context = self.app.parse(["put", "a", "--verbose", "b"])
        self.assertEqual(context.positionals, ["a", "b"])
        self.assertEqual(context.values, {})


class TestAbbreviatedFlags(TestCase):
    """Behavioral tests for -s tokens."""

    def setUp(self):
        self.handler, _ = _recorder()
        self.app = App(name="akita", shell=False)
        self.app.register(
            Command("get", self.handler, "g")
            .flag(Flag("all", "a", FlagKind.SWITCH))
            .flag(Flag("bare", "b", FlagKind.SWITCH))
            .flag(Flag("output", "o", FlagKind.VALUE))
            .flag(Flag("quiet"))
        )

    def testValueFlagScenario(self):
        _, context = self.app.parse(["get", "mydoc", "-o", "out.txt"])
        self.assertEqual(context.positionals, ["mydoc"])
        self.assertEqual(context.get("output"), "out.txt")

    def testOneTokenFiresSeveralSwitches(self):
        _, context = self.app.parse(["get", "-ab"])
        self.assertTrue(context.is_set("all"))
        self.assertTrue(context.is_set("bare"))

    def testValueFlagInsideCombinedTokenRaises(self):
        with self.assertRaises(MixedAbbreviationError) as raised:
            self.app.parse(["get", "-ao", "out.txt"])
        self.assertEqual(raised.exception.options["token"], "-ao")

    def testSwitchAndValueFlagShareExactToken(self):
        # "-ab" fires the "a" switch by containment, then matches "ab" exactly
        app = App(name="akita", shell=False)
        app.register(
            Command("get", self.handler)
            .flag(Flag("all", "a", FlagKind.SWITCH))
            .flag(Flag("abort", "ab", FlagKind.VALUE))
        )
        _, context = app.parse(["get", "-ab", "x"])
        self.assertEqual(context.values, {"all": Present, "abort": Value("x")})
        self.assertEqual(context.positionals, [])

    def testValueAtEndRaises(self):
        with self.assertRaises(MissingFlagValueError):
            self.app.parse(["get", "doc", "-o"])

    def testValueStartingWithDashRaises(self):
        with self.assertRaises(MissingFlagValueError):
            self.app.parse(["get", "-o", "-a"])

    def testFlagWithoutShortIsOnlyLong(self):
        _, context = self.app.parse(["get", "-quiet", "doc"])
        self.assertFalse(context.is_set("quiet"))
        self.assertEqual(context.positionals, ["doc"])

    def testUnknownShortIsIgnored(self):
        _, context = self.app.parse(["get", "-x", "doc"])
        self.assertEqual(context.positionals, ["doc"])
        self.assertEqual(context.values, {})

    def testValueTokenIsNotPositional(self):
        _, context = self.app.parse(["get", "one", "-o", "two", "three"])
        self.assertEqual(context.positionals, ["one", "three"])


class TestRun(TestCase):
    """Behavioral tests for the dispatch boundary."""

    def setUp(self):
        self.handler, self.calls = _recorder()
        self.state = {"provider": "https://del.dog"}
        self.app = App(self.state, "akita", colorful=False)
        self.app.register(
            Command("put", self.handler, "p")
            .flag(Flag("slug", "s"))
        )

    def testHandlerReceivesStateAndContext(self):
        self.app.run(["put", "file.txt", "-s", "note"])
        self.assertEqual(len(self.calls), 1)
        state, context = self.calls[0]
        self.assertIs(state, self.state)
        self.assertEqual(context.positionals, ["file.txt"])
        self.assertEqual(context.get("slug"), "note")

    def testPromptStringIsSplit(self):
        self.app.run("p 'a file.txt'")
        self.assertEqual(self.calls[0][1].positionals, ["a file.txt"])

    def testEmptyInputExitsWithStatusOne(self):
        with self.assertRaises(SystemExit) as raised:
            self.app.run([])
        self.assertEqual(raised.exception.code, 1)
        self.assertEqual(self.calls, [])

    def testDuplicateFlagExitsBeforeHandler(self):
        with self.assertRaises(SystemExit) as raised:
            self.app.run(["put", "-s", "a", "-s", "b"])
        self.assertEqual(raised.exception.code, 1)
        self.assertEqual(self.calls, [])

    def testMissingValueExitsWithStatusOne(self):
        with self.assertRaises(SystemExit) as raised:
            self.app.run(["put", "--slug"])
        self.assertEqual(raised.exception.code, 1)

    def testUnknownCommandExitsWithStatusOne(self):
        with self.assertRaises(SystemExit) as raised:
            self.app.run(["remove"])
        self.assertEqual(raised.exception.code, 1)

    def testLibraryModeRaisesWithRuntimeOptions(self):
        app = App(name="akita", shell=False)
        app.register(Command("put", self.handler))
        with self.assertRaises(MissingCommandError) as raised:
            app.run([])
        self.assertIs(raised.exception.options["tool"], app)
        self.assertFalse(raised.exception.options["shell"])

    def testHandlerErrorsPropagate(self):
        def failing(state, context):
            raise RuntimeError("boom")

        app = App(name="akita").register(Command("put", failing))
        with self.assertRaises(RuntimeError):
            app.run(["put"])

    def testRejectsNonStringTokens(self):
        with self.assertRaises(TypeError):
            self.app.run(["put", 1])


if __name__ == "__main__":
    unittest.main()
