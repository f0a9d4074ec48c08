"""
Akita application layer: register commands, parse argument lists, dispatch.

What this module provides
- App: owns the registered commands and the shared application state.
  • register()/command(): build the command table (at most one default).
  • parse(): pure resolution + token scanning; returns (command, context) or
    raises a CommandException.
  • run(): the single boundary; parses, surfaces faults (exit status 1 in shell
    mode), then invokes the matched handler with (state, context).

Resolution
- The first token is compared with each command's ident and alias in
  registration order; the first match wins and the token is consumed.
- Without a match, every token (including the first) is routed to the default
  command when one is registered.

Token scanning (single pass, one lookahead)
- "value"        → positional.
- "--name"       → first flag whose name appears within the token.
- "-s"           → every flag whose short alias appears within the token;
                   value flags need the exact "-s" spelling.
- value flags consume the next token; it must exist and not start with "-".
- unrecognized dash tokens are skipped.
"""
import difflib
import functools
import logging
import os.path
import shlex
import sys
from collections.abc import Iterable

from .commands import Command, command
from .context import Context, Value, Present
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class App(metaclass=SpecType):
    """
    Command table plus shared state, with the parser and the dispatch boundary.

    Properties (read-only)
    - name: program name used in fault headers and hints.
    - commands: registered commands, in registration order.
    - default: the fallback command (None when absent).
    - shell, fancy, colorful: fault policy/rendering (see akita.faults).

    Attributes
    - state: application data handed to the matched handler.
    """

    __introspectable__ = (
        "name",
        "commands",
        "default",
        "shell",
        "fancy",
        "colorful",
    )

    def __new__(cls, state=None, /, name=Unset, *, shell=True, fancy=False, colorful=True):
        """
        Construct an App.

        Parameters
        - state: Any
          Application data passed to the handler of the invoked command.
        - name: Unset | str
          Program name; defaults to the basename of sys.argv[0].
        - shell: bool
          When True, faults are printed to stderr and the process exits with
          status 1; when False, faults are raised to the caller.
        - fancy, colorful: bool
          Fault rendering options (panel chrome, colors).
        """
        name = coalesce(name, os.path.basename(sys.argv[0]) or "akita")
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        self = super().__new__(cls)
        self.state = state
        self._name = name
        self._commands = []
        self._default = None
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        return self

    def register(self, command, /, *, default=False):
        """
        Append a command to the table and return the app (chainable).

        Rules
        - Must be a Command not yet owned by an app.
        - Its ident and alias must not be used by another registered command.
        - default=True nominates it as the fallback target; only one is allowed.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} register() argument must be a command")
        if command.app is not None:
            raise ValueError(f"{type(self).__typename__} command {command.ident!r} is already registered")

        taken = set()
        for registered in self._commands:
            taken.add(registered.ident)
            if registered.alias:
                taken.add(registered.alias)

        for name in filter(None, (command.ident, command.alias)):
            if name in taken:
                raise ValueError(f"{type(self).__typename__} command name {name!r} is already in use")

        if default and self._default is not None:
            raise ValueError(
                f"{type(self).__typename__} default command is already {self._default.ident!r}"
            )

        command._app = self
        self._commands.append(command)
        if default:
            self._default = command
        return self

    def command(self, ident, /, alias=Unset, help=Unset, *, default=False):
        """
        Decorator that builds a Command from a handler and registers it here.

        Usage
            @app.command("get", "g")
            def get(state, context): ...
        """
        @rename("command")
        def wrapper(handler, /):
            self.register(created := command(ident, alias, help)(handler), default=default)
            return created

        return wrapper

    def _resolve(self, tokens):
        """
        pick the invoked command; return it with the tokens left to scan and the
        1-based position of the first of them.
        """
        if not self._commands:
            raise EmptyRegistryError(
                "no commands are registered",
                title="empty registry",
                code=FaultCode.EMPTY_REGISTRY,
                hint="register at least one command before running the app",
            )

        if not tokens:
            if self._default is not None:
                return self._default, tokens, 1
            raise MissingCommandError(
                "command not specified",
                title="missing command",
                code=FaultCode.MISSING_COMMAND,
                hint="pass one of: %s" % ", ".join(command.ident for command in self._commands),
                index=1,
            )

        token = tokens[0]
        for command in self._commands:
            if command.matches(token):
                logger.debug("resolved command %r from token %r", command.ident, token)
                return command, tokens[1:], 2

        if self._default is not None:
            logger.debug("no command matches %r; routing to default %r", token, self._default.ident)
            return self._default, tokens, 1

        names = [name for command in self._commands for name in (command.ident, command.alias) if name]
        suggestions = difflib.get_close_matches(token, names, 5)
        try:
            hint = "did you mean %r? available commands: %s" % (
                suggestions[0], ", ".join(command.ident for command in self._commands)
            )
        except IndexError:
            hint = "available commands: %s" % ", ".join(command.ident for command in self._commands)
        raise UnknownCommandError(
            "no command %r found" % token,
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            hint=hint,
            token=token,
            index=1,
            suggestions=suggestions,
        )

    def _take(self, flag, tokens, index, values, /, *, offset):
        """
        consume the value following tokens[index] for a value flag.

        returns the index of the consumed value token.
        """
        token = tokens[index]
        position = offset + index

        if index + 1 == len(tokens) or tokens[index + 1].startswith("-"):
            raise MissingFlagValueError(
                "no argument for flag %r found at %s position" % (token, _ordinal(position)),
                title="missing flag value",
                code=FaultCode.MISSING_FLAG_VALUE,
                hint="pass a value right after the flag (for example: %s <value>)" % token,
                token=token,
                index=position,
                flag=flag,
            )

        if flag.name in values:
            raise DuplicatedFlagError(
                "flag %r at %s position was already specified" % (token, _ordinal(position)),
                title="duplicated flag",
                code=FaultCode.DUPLICATED_FLAG,
                hint="keep a single %r; each value flag can be specified only once" % token,
                token=token,
                index=position,
                flag=flag,
            )

        values[flag.name] = Value(tokens[index + 1])
        return index + 1

    def _scan(self, command, tokens, /, *, offset=1):
        """
        classify tokens into positionals and flag values for the given command.

        offset is the 1-based position of tokens[0] in the original input; it
        only shapes the ordinals of fault messages.
        """
        positionals = []
        values = {}

        index = 0
        while index < len(tokens):
            token = tokens[index]

            if not token.startswith("-"):
                positionals.append(token)
            elif token.startswith("--"):
                for flag in command.flags:
                    if flag.name not in token:
                        continue
                    if flag.valued:
                        index = self._take(flag, tokens, index, values, offset=offset)
                    else:
                        values[flag.name] = Present
                    break
                else:
                    logger.debug("ignoring unrecognized flag %r for command %r", token, command.ident)
            else:
                matched = False
                for flag in command.flags:
                    if flag.short is None or flag.short not in token:
                        continue
                    matched = True
                    if not flag.valued:
                        values[flag.name] = Present
                        continue
                    if token != "-" + flag.short:
                        position = offset + index
                        raise MixedAbbreviationError(
                            "can't put an input flag alongside an option flag in %r at %s position" % (
                                token, _ordinal(position)
                            ),
                            title="mixed abbreviated flags",
                            code=FaultCode.MIXED_ABBREVIATION,
                            hint="pass -%s on its own, followed by its value" % flag.short,
                            token=token,
                            index=position,
                            flag=flag,
                        )
                    index = self._take(flag, tokens, index, values, offset=offset)
                    break
                if not matched:
                    logger.debug("ignoring unrecognized flag %r for command %r", token, command.ident)

            index += 1

        return Context(positionals, values)

    def parse(self, tokens, /):
        """
        Resolve the command and scan its tokens.

        Returns
        - tuple[Command, Context]

        Raises
        - CommandException subclasses (see akita.faults); nothing is printed.
        """
        tokens = list(tokens)
        command, remaining, offset = self._resolve(tokens)
        return command, self._scan(command, remaining, offset=offset)

    def trigger(self, fault, /):
        """
        Surface a fault with this app's runtime options (exits in shell mode).
        """
        trigger(fault, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def run(self, prompt=Unset, /):
        """
        Parse the prompt and dispatch to the matched command's handler.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Behavior
        - Parser faults are handed to trigger(): printed to stderr with exit
          status 1 in shell mode, raised otherwise. The handler never runs then.
        - Handler errors are not intercepted.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("run() argument must be a string or an iterable of strings")
        else:
            raise TypeError("run() argument must be a string or an iterable of strings")

        try:
            command, context = self.parse(tokens)
        except CommandException as fault:
            self.trigger(fault)
            return

        logger.debug("dispatching %r with %r", command.ident, context)
        command.invoke(self.state, context)


__all__ = (
    "App",
)
