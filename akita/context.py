"""
Akita invocation context.

A Context is the parse result of one invocation: the ordered positional
arguments and the resolved flag values of the matched command. It is built
fresh by the app parser, handed to the command handler once, then discarded.

Flag values
- Value(content): the value consumed by a value flag.
- Present: the singleton recorded for a switch flag.
"""
import collections
import functools

from rich.text import Text

from .utils import *

Value = collections.namedtuple("Value", ("content",))
Value.__doc__ = "resolved value of a value flag"


class PresentType:
    """
    singleton marker recorded for switch flags that were seen.

    - Truthy: a seen switch reads naturally in conditions.
    - Stable representation: repr(Present) == "Present".
    - Identity: PresentType() always returns the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return True

    def __repr__(self):
        return "Present"

    def __rich__(self):
        return Text(repr(self), style="green")

    def __init_subclass__(cls, **options):
        raise TypeError("type 'PresentType' is not an acceptable base type")


Present = PresentType()


class Context(metaclass=SpecType):
    """
    Parse result of one invocation.

    Properties (read-only copies)
    - positionals: list[str] in encounter order.
    - values: dict[str, Value | Present] keyed by flag name.
    """

    __introspectable__ = (
        "positionals",
        "values",
    )

    def __new__(cls, positionals=(), values=Unset, /):
        self = super().__new__(cls)
        self._positionals = list(positionals)
        self._values = dict(coalesce(values, {}))
        return self

    def is_set(self, name, /):
        """
        True when the flag with this name was seen, regardless of its kind.
        """
        return name in self._values

    def get(self, name, /):
        """
        Return the value of a seen value flag.

        Returns None for switch flags and for flags that were not given;
        use is_set() for switches.
        """
        match self._values.get(name):
            case Value(content=content):
                return content
            case _:
                return None


__all__ = (
    "Value",
    "PresentType",
    "Present",
    "Context",
)
