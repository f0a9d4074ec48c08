"""
Akita command layer: declare subcommands and bind their handlers.

What this module provides
- Command: one subcommand of an app, with:
  • an identifier and an optional alias (both usable as the first token),
  • a handler called as handler(state, context) once parsing succeeds,
  • an ordered list of flags (declaration order drives flag matching),
  • optional static help text supplied by the registrant.
- command(...): factory/decorator that wraps a function into a Command.

Quick start
    from akita import App, Flag, FlagKind, command

    @command("put", "p", help="upload a document")
    def put(state, context):
        print(context.get("slug"), context.positionals)

    put.flag(Flag("slug", "s", FlagKind.VALUE, "desired slug"))

    App(state).register(put).run()

Design notes
- Commands are built incrementally: every flag() call appends and returns the
  command, so declarations read as a chain.
- A command belongs to a single app; the app records itself as the owner when
  the command is registered.
"""
import inspect

from .flags import Flag
from .utils import *


class Command(metaclass=SpecType):
    """
    Subcommand declaration with its handler and flags.

    Properties (read-only)
    - ident: identifier matched against the first token.
    - alias: optional second identifier (None when absent).
    - handler: callable(state, context).
    - flags: list of Flag, in declaration order.
    - help: static help text (None when absent).
    - app: the owning app once registered (None before).
    """

    __introspectable__ = (
        "ident",
        "alias",
        "handler",
        "flags",
        "help",
        "app",
    )

    __displayable__ = (
        "ident",
        "alias",
        "flags",
        "help",
    )

    def __new__(cls, ident, handler, /, alias=Unset, help=Unset):
        """
        Construct a Command.

        Parameters
        - ident: str
          Identifier; must be a valid shell-style name.
        - handler: Callable[[state, Context], Any]
          Called with the app state and the parsed context.
        - alias: Unset | str
          Optional alternative identifier; must differ from ident.
        - help: Unset | str
          Static help text; defaults to the handler docstring when present.

        Raises
        - TypeError / ValueError on malformed metadata.
        """
        ident = validate_name(cls, ident, "ident")
        if alias is not Unset:
            alias = validate_name(cls, alias, "alias")
            if alias == ident:
                raise ValueError(f"{cls.__typename__} 'alias' cannot repeat its ident")

        if not callable(handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be callable")

        help = coalesce(help, inspect.getdoc(handler) or Unset)
        if not isinstance(help, str | Unset):
            raise TypeError(f"{cls.__typename__} 'help' must be a string")
        elif isinstance(help, str) and not (help := help.strip()):
            raise ValueError(f"{cls.__typename__} 'help' cannot be empty")

        self = super().__new__(cls)
        self._ident = ident
        self._alias = coalesce(alias)
        self._handler = handler
        self._flags = []
        self._help = coalesce(help)
        self._app = None
        return self

    def flag(self, flag, /):
        """
        Append a flag declaration and return the command (chainable).

        Rules
        - Must be a Flag.
        - Flag names and short aliases must be unique within the command, and a
          short alias cannot reuse another flag's name.
        """
        if not isinstance(flag, Flag):
            raise TypeError(f"{type(self).__typename__} flag() argument must be a flag")

        taken = set()
        for declared in self._flags:
            taken.add(declared.name)
            if declared.short:
                taken.add(declared.short)

        if flag.name in taken:
            raise ValueError(f"{type(self).__typename__} flag name {flag.name!r} is already in use")
        if flag.short and flag.short in taken:
            raise ValueError(f"{type(self).__typename__} flag short {flag.short!r} is already in use")

        self._flags.append(flag)
        return self

    def matches(self, token, /):
        """
        True when the token names this command by ident or alias.
        """
        return token == self._ident or (self._alias is not None and token == self._alias)

    def invoke(self, state, context, /):
        """
        Dispatch to the handler with the app state and the parsed context.

        The handler's return value is ignored.
        """
        self._handler(state, context)


def command(ident, /, alias=Unset, help=Unset):
    """
    Create a decorator that wraps a handler function into a Command.

    Usage
        @command("get", "g", help="download a document")
        def get(state, context): ...

    Returns
    - Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError("@command() must be applied to a callable")
        return Command(ident, handler, alias, help)

    return wrapper


__all__ = (
    "Command",
    "command",
)
