"""
Switchyard registry: declared options and groups, plus the parse entry points.

Responsibilities
- Alias map: every alias of every named option points back to its owner;
  a second owner for the same alias is a DuplicateAliasError.
- Positional list: positional options in declaration order.
- Group map: option groups by name; a name collision is a DuplicateGroupError.
- max_prefix_length: longest alias among PREFIX/MAY_PREFIX options, which
  bounds the prefix search of the dispatcher.
- Engine flags: allow_unknown, allow_missing, deferred, shell, responses,
  limit, and the rendering flags colorful, fancy and prog.

Entry points
- parse(tokens) -> Outcome
- invoke(tokens) -> Outcome, surfacing failures as ParseExit (raised, or
  rendered with an exit status of 1 in shell mode).
"""
import functools
import logging
import operator
import re
import shlex
import sys
from collections.abc import Iterable

from .faults import DuplicateAliasError, DuplicateGroupError, ParseExit, trigger
from .options import Formatting, Option, OptionGroup
from .session import Session
from .utils import *

logger = logging.getLogger(__name__)


class RegistryType(type):
    """
    Metaclass mirroring __introspectable__ names into read-only properties and
    providing __repr__/__rich_repr__ (see switchyard.options for the twin).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _tokenize(tokens):
    if tokens is Unset:
        return sys.argv[1:]
    elif isinstance(tokens, str):
        return shlex.split(tokens)
    elif isinstance(tokens, Iterable):
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class Registry(metaclass=RegistryType):
    """
    Owner of the declared options and groups of one command line.

    Declaring
        >>> registry = Registry(deferred=True)
        >>> verbose = registry.option("verbose|v", type=bool, arguments=Arguments.DISALLOWED)
        >>> files = registry.option("files", storage=Container(list), formatting=Formatting.POSITIONAL)

    Parsing
        >>> outcome = registry.parse(["-v", "a.txt", "b.txt"])
        >>> bool(outcome), files.value
        (True, ['a.txt', 'b.txt'])

    Notes
    - Options keep their count/value across parses; declare fresh options
      (and a fresh registry) for every independent command line.
    - Structural errors (TypeError, ValueError and their Duplicate*Error
      subclasses) are raised right away and never turned into faults.
    """

    __introspectable__ = (
        "options",
        "positionals",
        "groups",
        "max_prefix_length",
        "allow_unknown",
        "allow_missing",
        "deferred",
        "shell",
        "responses",
        "limit",
        "colorful",
        "fancy",
        "prog",
    )

    __displayable__ = (
        "positionals",
        "groups",
        "allow_unknown",
        "allow_missing",
        "deferred",
        "shell",
        "responses",
    )

    def __new__(
            cls,
            *,
            allow_unknown=False,
            allow_missing=False,
            deferred=False,
            shell=False,
            responses=False,
            limit=100,
            colorful=False,
            fancy=False,
            prog=Unset,
    ):
        """
        Construct an empty registry.

        Parameters
        - allow_unknown: collect unknown options into Outcome.unrecognized
          instead of reporting them.
        - allow_missing: skip the required-occurrence check.
        - deferred: accumulate every fault (True) or stop at the first (False).
        - shell: invoke() renders faults and exits instead of raising.
        - responses: expand "@file" tokens unless parse() says otherwise.
        - limit: maximum number of response-file expansions per parse.
        - colorful, fancy, prog: rendering context for diagnostics.
        """
        if not isinstance(limit, int) or isinstance(limit, bool):
            raise TypeError(f"{cls.__typename__} 'limit' must be an integer")
        elif limit < 0:
            raise ValueError(f"{cls.__typename__} 'limit' cannot be negative")
        if not isinstance(prog, str | Unset):
            raise TypeError(f"{cls.__typename__} 'prog' must be a string")
        elif isinstance(prog, str) and not (prog := prog.strip()):
            raise ValueError(f"{cls.__typename__} 'prog' cannot be empty")

        self = super().__new__(cls)
        self._options = {}
        self._positionals = []
        self._groups = {}
        self._max_prefix_length = 0
        self._allow_unknown = bool(allow_unknown)
        self._allow_missing = bool(allow_missing)
        self._deferred = bool(deferred)
        self._shell = bool(shell)
        self._responses = bool(responses)
        self._limit = limit
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._prog = coalesce(prog)
        return self

    def add(self, object, /):
        """
        Register an Option or an OptionGroup and return it.
        """
        match object:
            case Option():
                return self._add_option(object)
            case OptionGroup():
                return self.add_group(object)
        raise TypeError("add() argument must be an option or an option group")

    def _add_option(self, option):
        if option.formatting is Formatting.POSITIONAL:
            if not option.name:
                raise ValueError(f"{type(self).__typename__} positional options must have a name")
            elif any(positional is option for positional in self._positionals):
                raise ValueError(f"{type(self).__typename__} positional {option.name!r} is already registered")
            self._positionals.append(option)
            logger.debug("registered positional %r at index %d", option.name, len(self._positionals) - 1)
            return option

        if not option.aliases:
            raise ValueError(f"{type(self).__typename__} unnamed options must provide allowed values")

        # all-or-nothing: a clash leaves the alias map untouched
        for alias in option.aliases:
            if alias in self._options:
                raise DuplicateAliasError(f"{type(self).__typename__} alias {alias!r} is already in use")
        self._options.update(dict.fromkeys(option.aliases, option))

        if option.prefix:
            self._max_prefix_length = max(self._max_prefix_length, *map(len, option.aliases))

        logger.debug("registered option %r with aliases %s", option.display, ", ".join(option.aliases))
        return option

    def add_group(self, group, /):
        """
        Register an OptionGroup under its name and return it.
        """
        if not isinstance(group, OptionGroup):
            raise TypeError("add_group() argument must be an option group")
        if self._groups.setdefault(group.name, group) is not group:
            raise DuplicateGroupError(f"{type(self).__typename__} group {group.name!r} is already in use")
        logger.debug("registered group %r (%s)", group.name, group.constraint.value)
        return group

    def option(self, *args, **kwargs):
        """
        Build an Option from the arguments and register it.
        """
        return self.add(Option(*args, **kwargs))

    def group(self, *args, **kwargs):
        """
        Build an OptionGroup from the arguments and register it.
        """
        return self.add_group(OptionGroup(*args, **kwargs))

    def resolve(self, alias, /):
        """
        Return the option owning `alias`, or None.
        """
        if not isinstance(alias, str):
            raise TypeError("resolve() argument must be a string")
        return self._options.get(alias)

    def unique_options(self):
        """
        Return the named options once each, sorted by name (stable).
        """
        unique = []
        for option in self._options.values():
            if not any(seen is option for seen in unique):
                unique.append(option)
        return sorted(unique, key=lambda option: option.name)

    def parse(self, tokens=Unset, /, *, expand=Unset):
        """
        Parse a token stream against the declared options.

        Parameters
        - tokens:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as given.
        - expand: bool | Unset
          Expand "@file" tokens first; defaults to the registry 'responses' flag.

        Returns
        - Outcome: success flag, faults and unrecognized tokens.
        """
        return Session(self).run(_tokenize(tokens), expand=bool(coalesce(expand, self._responses)))

    def invoke(self, tokens=Unset, /):
        """
        Parse and surface a failure the way a command-line program does.

        On failure a ParseExit grouping every fault is triggered: in shell mode
        it is rendered to stderr and the process exits with status 1, otherwise
        it is raised. On success the Outcome is returned.
        """
        if not (outcome := self.parse(tokens)):
            trigger(
                ParseExit(outcome.faults),
                shell=self._shell,
                fancy=self._fancy,
                colorful=self._colorful,
                prog=self._prog,
            )
        return outcome


__all__ = (
    "Registry",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del RegistryType
