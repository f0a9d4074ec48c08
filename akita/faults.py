"""
Akita faults (parser errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parser error.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- CommandException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- trigger(): the single exit boundary; merges runtime options into the fault then
  raises it (library mode) or prints it and exits with status 1 (shell mode).

UX goals
- Position-first messages: every token-level message includes the ordinal
  position of the offending token (“at second position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The app parser raises these exceptions; App.run() hands them to trigger().
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the interpreter (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • EMPTY_REGISTRY, MISSING_COMMAND, UNKNOWN_COMMAND
    - flags (1111x)
      • MIXED_ABBREVIATION, DUPLICATED_FLAG, MISSING_FLAG_VALUE

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (1110x) ---
    EMPTY_REGISTRY              = 11100
    UNKNOWN_COMMAND             = 11101
    MISSING_COMMAND             = 11103

    # --- flag errors (1111x) ---
    MIXED_ABBREVIATION          = 11111
    DUPLICATED_FLAG             = 11115
    MISSING_FLAG_VALUE          = 11117

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base parser fault.

    options (merged at raise time and at trigger time)
    - title, code, hint: message chrome rendered by __rich__.
    - token, index: offending token and its 1-based position (when relevant).
    - tool: the app surfacing the fault (program name in the header).
    - shell, fancy, colorful: runtime rendering/exit policy.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", "akita")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.options["code"].normalize(), styler("code")),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyRegistryError(CommandException): ...
class MissingCommandError(CommandException): ...
class UnknownCommandError(CommandException): ...
class MixedAbbreviationError(CommandException): ...
class DuplicatedFlagError(CommandException): ...
class MissingFlagValueError(CommandException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console on stderr followed by
      exit status 1; otherwise, the exception is raised.

    typical options
    - tool, shell, fancy, colorful.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "CommandException",
    "EmptyRegistryError",
    "MissingCommandError",
    "UnknownCommandError",
    "MixedAbbreviationError",
    "DuplicatedFlagError",
    "MissingFlagValueError",
    "FaultCode",
    "trigger",
)
