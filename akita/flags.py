"""
Akita flag specifications.

Overview
- FlagKind: the two kinds of named flags a command may declare.
  • VALUE: consumes the following token as its value (e.g., --slug note, -s note).
  • SWITCH: presence-only, carries no value (e.g., --reset, -r).
- Flag: immutable declaration of one flag: its canonical name (the identifier
  used for lookups in the parsed context), an optional short alias used with a
  single dash, its kind, and a description.

Matching (performed by the app parser, documented here for registrants)
- "--<token>" tokens match a flag when the flag's name appears within the token.
- "-<token>" tokens match a flag when the flag's short alias appears within the
  token; value flags additionally require the token to be exactly "-<short>".

Quick example:
    >>> from akita.flags import Flag, FlagKind
    >>> slug = Flag("slug", "s", FlagKind.VALUE, "desired slug")
    >>> reset = Flag("reset", "r", FlagKind.SWITCH).description("drop credentials")
"""
from enum import Enum

from rich.text import Text

from .utils import *


class FlagKind(Enum):
    """
    kind of a named flag.

    - VALUE: value-taking flag; its context entry is always a Value.
    - SWITCH: boolean-style flag; its context entry is always Present.
    """
    VALUE = "value"
    SWITCH = "switch"

    def __rich__(self):
        return Text(self.value, style="cyan" if self is FlagKind.VALUE else "magenta")


class Flag(metaclass=SpecType):
    """
    Named flag specification.

    Properties (read-only)
    - name: canonical identifier, also the long form (--name).
    - short: optional abbreviation used as -short (None when absent).
    - kind: FlagKind.VALUE or FlagKind.SWITCH.
    - descr: optional description (None when absent).
    """

    __introspectable__ = (
        "name",
        "short",
        "kind",
        "descr",
    )

    def __new__(cls, name, short=Unset, kind=FlagKind.VALUE, descr=Unset, /):
        """
        Construct a Flag.

        Parameters
        - name: str
          Canonical identifier; must be a valid shell-style name without dashes.
        - short: Unset | str
          Abbreviated alias (e.g., "o" for -o). Must differ from the name.
        - kind: FlagKind
          VALUE (default) or SWITCH.
        - descr: Unset | str
          Short description; trimmed, must be non-empty when provided.

        Raises
        - TypeError / ValueError on malformed metadata.
        """
        name = validate_name(cls, name, "name")
        if short is not Unset:
            short = validate_name(cls, short, "short")
            if short == name:
                raise ValueError(f"{cls.__typename__} 'short' cannot repeat its name")

        if not isinstance(kind, FlagKind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a flag-kind")

        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        self = super().__new__(cls)
        self._name = name
        self._short = coalesce(short)
        self._kind = kind
        self._descr = coalesce(descr)
        return self

    def description(self, descr, /):
        """
        Return a copy of this flag carrying the given description.
        """
        return self.__replace__(descr=descr)

    def __replace__(self, **overrides):
        metadata = {
            "name": self.name,
            "short": coalesce(self.short, Unset),
            "kind": self.kind,
            "descr": coalesce(self.descr, Unset),
        } | overrides
        return type(self)(*metadata.values())

    def __setattr__(self, name, value, /):
        # backing fields are written once, during construction
        if hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is immutable")
        object.__setattr__(self, name, value)

    @property
    def valued(self):
        """
        True when this flag consumes a value.
        """
        return self.kind is FlagKind.VALUE


__all__ = (
    "FlagKind",
    "Flag",
)
