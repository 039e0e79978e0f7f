"""
Switchyard faults (structural errors, parse faults) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  fault. Codes are grouped by domain so logs and searches stay predictable.
- DuplicateAliasError / DuplicateGroupError: structural errors raised while
  declaring options. They signal a broken declaration, never bad input, and
  are always raised immediately.
- ParseException: base type for runtime faults; carries a message plus
  structured options (code, input, index, hint, …) and renders itself with rich.
- ParseExit: an ExceptionGroup collecting every fault of a failed parse.
- trigger(): central entry point to surface an exit (render or raise).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: every message names the ordinal position of the
  offending token (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, one hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
import copy
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
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - options (1111x)
      • UNKNOWN_OPTION, UNEXPECTED_ARGUMENT, ALREADY_SPECIFIED,
        MISSING_ARGUMENT, MISSING_ARGUMENT_IN_GROUP
    - positionals and requirements (1112x)
      • UNHANDLED_POSITIONAL, MISSING_REQUIRED_OPTION
    - delegated value parsing (1113x)
      • INVALID_ARGUMENT
    - groups (1115x)
      • GROUP_CONSTRAINT
    - response files (1116x)
      • RESPONSE_FILE, TOO_MANY_RESPONSE_FILES
    """
    # --- option errors (1111x) ---
    UNKNOWN_OPTION              = 11112
    UNEXPECTED_ARGUMENT         = 11113
    ALREADY_SPECIFIED           = 11115
    MISSING_ARGUMENT            = 11117
    MISSING_ARGUMENT_IN_GROUP   = 11118

    # --- positional/requirement errors (1112x) ---
    UNHANDLED_POSITIONAL        = 11121
    MISSING_REQUIRED_OPTION     = 11125

    # --- delegated errors (1113x) ---
    INVALID_ARGUMENT            = 11131

    # --- group errors (1115x) ---
    GROUP_CONSTRAINT            = 11151

    # --- response-file errors (1116x) ---
    RESPONSE_FILE               = 11161
    TOO_MANY_RESPONSE_FILES     = 11162

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class DuplicateAliasError(ValueError):
    """An alias is already taken by another option of the same registry."""


class DuplicateGroupError(ValueError):
    """A group name is already taken in the same registry."""


def _renderer(options, styles):
    main = __import__("__main__")
    styles = defaultdict(str, styles | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", False)

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

    prog = text(getattr(main, "__prog__", options.get("prog") or "switchyard"), styler("prog-name"))
    return styler, text, prog


class ParseException(Exception):
    """
    base type of every runtime parse fault.

    options
    - code: FaultCode of the fault.
    - title: short lowercased title shown in the header.
    - hint: one actionable sentence.
    - input: the offending token, alias or group name.
    - index: 1-based position of the offending token (when meaningful).
    - prog, colorful, fancy, ratio: rendering context injected by the session.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def input(self):
        return self.options.get("input")

    @property
    def index(self):
        return self.options.get("index")

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styler, text, prog = _renderer(self.options, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code else "", styler("code")),
            " | ",
            text(self.options.get("title", "parse error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint", ""), styler("hint")))

        if self.options.get("fancy", False):
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(ParseException): ...
class UnhandledPositionalError(ParseException): ...
class MissingArgumentError(ParseException): ...
class MissingArgumentInGroupError(ParseException): ...
class UnexpectedArgumentError(ParseException): ...
class AlreadySpecifiedError(ParseException): ...
class InvalidArgumentError(ParseException): ...
class GroupConstraintError(ParseException): ...
class MissingRequiredOptionError(ParseException): ...
class ResponseFileError(ParseException): ...
class TooManyResponseFilesError(ParseException): ...


class ParseExit(ExceptionGroup[ParseException]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        styler, text, prog = _renderer(self.options, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Exit)
        })

        header = Text.assemble("[ ", prog, " — ", text(self.message.title(), styler("title")), " ]")

        renders = []

        for exception in self.exceptions:
            renders.append(copy.replace(exception, ratio=2/3))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be an fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "DuplicateAliasError",
    "DuplicateGroupError",
    "ParseException",
    "UnknownOptionError",
    "UnhandledPositionalError",
    "MissingArgumentError",
    "MissingArgumentInGroupError",
    "UnexpectedArgumentError",
    "AlreadySpecifiedError",
    "InvalidArgumentError",
    "GroupConstraintError",
    "MissingRequiredOptionError",
    "ResponseFileError",
    "TooManyResponseFilesError",
    "ParseExit",
    "trigger",
    "getdoc",
)
