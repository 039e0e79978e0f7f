r"""
Switchyard option specifications.

Overview
- Policies
  • Occurrences: how many times an option may/must appear.
  • Arguments: whether a value is optional, required or disallowed.
  • Formatting: how the value is attached to the name (separate token, '=',
    inline prefix, clustered short flags, or positional).
  • Misc: bitset of extra behaviour (COMMA_SEPARATED, CONSUME_AFTER, HIDDEN).
  • Constraint: cardinality rule of an OptionGroup.

- Value parsers: callables (name, text) -> value, raising on bad input.
  • Converter(type): str passthrough, bool words, int with base detection,
    any other type called on the text.
  • MapParser(mapping): key lookup; when the text is empty the matched alias
    is the key, and allowed() exposes the keys as implicit aliases.

- Storage strategies (chosen once, at declaration)
  • Scalar(): every parsed value overwrites the previous one.
  • Container(factory, inserter): every parsed value is inserted into a
    container built by factory (list, set, dict, ...).

- Specs
  • Option: a declared command-line switch or positional.
  • OptionGroup: a named set of options under a cardinality constraint.

Quick example:
    >>> from switchyard.options import *
    >>> level = Option("debug-level|d", type=int, arguments=Arguments.REQUIRED)
    >>> files = Option("files", storage=Container(list), formatting=Formatting.POSITIONAL)
    >>> inputs = OptionGroup("inputs", Constraint.ONE).add(level, files)

Validation highlights
- Aliases are split on '|', must be non-empty, free of whitespace and '=',
  must not start with '-', and must be unique within an option.
- An option without a name needs a parser exposing allowed() values.
- CONSUME_AFTER is only meaningful on positional options.
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping, MutableMapping, MutableSequence, MutableSet
from enum import Enum, IntFlag

from .strings import split
from .utils import *


class Occurrences(Enum):
    OPTIONAL = "optional"          # zero or one occurrence allowed
    ZERO_OR_MORE = "zero-or-more"  # zero or more occurrences allowed
    REQUIRED = "required"          # exactly one occurrence required
    ONE_OR_MORE = "one-or-more"    # one or more occurrences required


class Arguments(Enum):
    OPTIONAL = "optional"          # a value can appear... or not
    REQUIRED = "required"          # a value must appear
    DISALLOWED = "disallowed"      # a value may not be specified (flags)


class Formatting(Enum):
    DEFAULT = "default"
    PREFIX = "prefix"              # must directly prefix its value
    MAY_PREFIX = "may-prefix"      # can directly prefix its value
    GROUPING = "grouping"          # can be clustered with other short options
    POSITIONAL = "positional"      # matched by position, no dash required


class Misc(IntFlag):
    NONE = 0
    COMMA_SEPARATED = 0x01         # split the value on commas
    CONSUME_AFTER = 0x02           # every following token is positional
    HIDDEN = 0x04                  # not listed by help renderers


class Constraint(Enum):
    DEFAULT = "default"            # never checked
    ZERO = "zero"
    ZERO_OR_ONE = "zero-or-one"
    ONE = "one"
    ONE_OR_MORE = "one-or-more"
    ALL = "all"
    ZERO_OR_ALL = "zero-or-all"


class Converter:
    """
    Default value parser built from a plain type.

    Conversion rules
    - str: the text is returned unchanged.
    - bool: "", "1", "true", "on" → True; "0", "false", "off" → False.
    - int: int(text, 0), so "0x1F", "0o17" and "0b101" are accepted.
    - anything else: type(text).

    Failures surface as ValueError naming both the text and the option.
    """
    __slots__ = ("type",)

    def __init__(self, type=str, /):
        if not callable(type):
            raise TypeError("converter 'type' must be callable")
        self.type = type

    def __call__(self, name, text, /):
        if self.type is str:
            return text
        if self.type is bool:
            if text in ("", "1", "true", "on"):
                return True
            if text in ("0", "false", "off"):
                return False
            raise ValueError("invalid argument %r for option %r" % (text, name))
        if self.type is int:
            return int(text, 0)
        return self.type(text)

    def __repr__(self):
        return f"converter({getattr(self.type, '__name__', self.type)!s})"


class MapParser:
    """
    Value parser that maps fixed keys to values.

    The key is the text, or the matched alias when the text is empty; this
    lets an unnamed option be invoked by any of its keys ("-O2").
    """
    __slots__ = ("_map",)

    def __init__(self, mapping, /):
        if isinstance(mapping, Mapping):
            mapping = mapping.items()
        if not isinstance(mapping, Iterable):
            raise TypeError("map-parser argument must be a mapping or an iterable of pairs")
        self._map = {}
        for key, value in mapping:
            if not isinstance(key, str) or not key:
                raise ValueError("map-parser keys must be non-empty strings")
            elif key in self._map:
                raise ValueError("map-parser keys cannot contain duplicates")
            self._map[key] = value

    def __call__(self, name, text, /):
        try:
            return self._map[text or name]
        except KeyError:
            raise ValueError("invalid argument %r for option %r" % (text, name)) from None

    def allowed(self):
        return tuple(self._map)

    def __repr__(self):
        return f"map-parser({self._map!r})"


class Scalar:
    """
    Storage strategy: keep a single value, overwritten on every occurrence.
    """
    __slots__ = ()

    kind = "scalar"

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def initial(self, default, /):
        return coalesce(default)

    def store(self, current, value, /):
        return value

    def __repr__(self):
        return "scalar()"


def _append(container, value):
    container.append(value)


def _add(container, value):
    container.add(value)


def _assign(container, pair):
    key, value = pair
    container[key] = value


class Container:
    """
    Storage strategy: insert every occurrence into a container.

    The inserter is picked once, from a probe instance of the factory:
    mutable sets use add(), mutable sequences append(), and mutable mappings
    expect (key, value) pairs from the parser. Other containers must supply
    an explicit inserter(container, value).
    """
    __slots__ = ("factory", "inserter")

    kind = "container"

    def __init__(self, factory=list, /, inserter=Unset):
        if not callable(factory):
            raise TypeError("container 'factory' must be callable")
        if inserter is Unset:
            match factory():
                case MutableSet():
                    inserter = _add
                case MutableSequence():
                    inserter = _append
                case MutableMapping():
                    inserter = _assign
                case _:
                    raise TypeError("container %r requires an explicit 'inserter'" % getattr(factory, "__name__", factory))
        elif not callable(inserter):
            raise TypeError("container 'inserter' must be callable")
        self.factory = factory
        self.inserter = inserter

    def initial(self, default, /):
        return self.factory() if default is Unset or default is None else self.factory(default)

    def store(self, current, value, /):
        self.inserter(current, value)
        return current

    def __repr__(self):
        return f"container({getattr(self.factory, '__name__', self.factory)!s})"


class OptionType(type):
    """
    Metaclass that turns specs into introspectable descriptors.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
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


def _sanitize_policies(cls, metadata, /):
    """
    Internal: validate the enumerated policy fields and the label.

    Occurrences default to OPTIONAL for scalar storage and ZERO_OR_MORE for
    container storage, so that a list option accepts repeats out of the box.
    """
    if not isinstance(storage := metadata["storage"], Scalar | Container | Unset):
        raise TypeError(f"{cls.__typename__} 'storage' must be a scalar or a container")
    metadata["storage"] = storage = coalesce(storage, Scalar())

    if not isinstance(occurrences := metadata["occurrences"], Occurrences | Unset):
        raise TypeError(f"{cls.__typename__} 'occurrences' must be an occurrences policy")
    metadata["occurrences"] = coalesce(
        occurrences, Occurrences.ZERO_OR_MORE if isinstance(storage, Container) else Occurrences.OPTIONAL
    )

    if not isinstance(metadata["arguments"], Arguments):
        raise TypeError(f"{cls.__typename__} 'arguments' must be an arguments policy")
    if not isinstance(metadata["formatting"], Formatting):
        raise TypeError(f"{cls.__typename__} 'formatting' must be a formatting mode")
    if not isinstance(metadata["flags"], Misc):
        raise TypeError(f"{cls.__typename__} 'flags' must be misc flags")
    if metadata["flags"] & Misc.CONSUME_AFTER and metadata["formatting"] is not Formatting.POSITIONAL:
        raise ValueError(f"{cls.__typename__} 'consume-after' applies to positional options only")

    if not isinstance(label := metadata["label"], str):
        raise TypeError(f"{cls.__typename__} 'label' must be a string")
    elif not (label := label.strip()):
        raise ValueError(f"{cls.__typename__} 'label' cannot be empty")
    metadata["label"] = label

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_parser(cls, metadata, /):
    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")
    if metadata["parser"] is Unset:
        metadata["parser"] = Converter(metadata["type"])
    elif not callable(metadata["parser"]):
        raise TypeError(f"{cls.__typename__} 'parser' must be callable")


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the pipe-delimited name and derive the aliases.

    - Positional options keep their name as a single alias; it only labels
      the option in messages and may contain any non-blank text.
    - Named options split on '|' into aliases matching r"[^\s=-][^\s=]*".
    - Unnamed options borrow parser.allowed() as aliases (possibly none; the
      registry rejects those when they are added).
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    metadata["name"] = name = name.strip()

    if metadata["formatting"] is Formatting.POSITIONAL:
        metadata["aliases"] = (name,) if name else ()
        return

    if not name:
        allowed = getattr(metadata["parser"], "allowed", None)
        metadata["aliases"] = tuple(allowed()) if callable(allowed) else ()
        return

    aliases = []
    for alias in split(name, "|"):
        if not alias:
            raise ValueError(f"{cls.__typename__} aliases cannot be empty-strings")
        elif not re.fullmatch(r"[^\s=-][^\s=]*", alias):
            raise ValueError(f"{cls.__typename__} alias {alias!r} must not start with '-' or contain blanks or '='")
        elif alias in aliases:
            raise ValueError(f"{cls.__typename__} aliases cannot contain duplicates")
        aliases.append(alias)
    metadata["aliases"] = tuple(aliases)


class Option(metaclass=OptionType):
    """
    A declared command-line switch (or positional).

    Highlights
    - Name: pipe-delimited aliases ("debug-level|d"), matched without dashes.
    - Policies: occurrences, arguments, formatting and misc flags.
    - Parser: (name, text) -> value; defaults to Converter(type).
    - Storage: Scalar() (default) or Container(factory[, inserter]).
    - State: count and value are updated by the parsing session only.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "label",
        "occurrences",
        "arguments",
        "formatting",
        "flags",
        "parser",
        "storage",
        "descr",
    )

    __displayable__ = (
        "name",
        "label",
        "occurrences",
        "arguments",
        "formatting",
        "flags",
        "count",
        "value",
    )

    def __new__(
            cls,
            name="",
            /,
            parser=Unset,
            *,
            type=str,
            label="arg",
            occurrences=Unset,
            arguments=Arguments.OPTIONAL,
            formatting=Formatting.DEFAULT,
            flags=Misc.NONE,
            default=Unset,
            storage=Unset,
            descr=Unset,
    ):
        """
        Construct an Option with the provided metadata.

        Parameters
        - name: str
          Pipe-delimited aliases; may be empty when the parser exposes allowed().
        - parser: Callable[[str, str], Any]
          Value parser; when Unset, Converter(type) is used.
        - type: Callable
          Target type for the default Converter.
        - label: str
          Display name of the value in messages (default "arg").
        - occurrences, arguments, formatting, flags:
          Policies (see module overview).
        - default: Any
          Initial value; for containers, the iterable the container is built from.
        - storage: Scalar | Container
        - descr: str
          Optional one-line description.
        """
        metadata = {
            "name": name,
            "parser": parser,
            "type": type,
            "label": label,
            "occurrences": occurrences,
            "arguments": arguments,
            "formatting": formatting,
            "flags": flags,
            "storage": storage,
            "descr": descr,
        }
        _sanitize_policies(cls, metadata)
        _sanitize_parser(cls, metadata)
        _sanitize_names(cls, metadata)
        del metadata["type"]

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._count = 0
        self._value = self.storage.initial(default)
        return self

    @property
    def count(self):
        """
        Number of values stored so far (one per comma-separated piece).
        """
        return self._count

    @property
    def value(self):
        """
        The stored value: the last parsed value for scalars, the live
        container for container storage.
        """
        return self._value

    @property
    def display(self):
        """
        Name used in messages: the primary alias, or the label when unnamed.
        """
        return self.aliases[0] if self.name else self.label

    @property
    def prefix(self):
        return self.formatting in (Formatting.PREFIX, Formatting.MAY_PREFIX)

    @property
    def unbounded(self):
        return self.occurrences in (Occurrences.ZERO_OR_MORE, Occurrences.ONE_OR_MORE)

    @property
    def required(self):
        return self.occurrences in (Occurrences.REQUIRED, Occurrences.ONE_OR_MORE)

    @property
    def occurrence_allowed(self):
        """
        False once a single-occurrence option (OPTIONAL/REQUIRED) was seen.
        """
        return self.unbounded or self._count == 0

    @property
    def occurrence_required(self):
        """
        True while a REQUIRED/ONE_OR_MORE option has not been seen.
        """
        return self.required and self._count == 0

    def _record(self, value, /):
        self._value = self._storage.store(self._value, value)
        self._count += 1


def _satisfied(constraint, specified, total):
    match constraint:
        case Constraint.DEFAULT:
            return True
        case Constraint.ZERO:
            return specified == 0
        case Constraint.ZERO_OR_ONE:
            return specified <= 1
        case Constraint.ONE:
            return specified == 1
        case Constraint.ONE_OR_MORE:
            return specified >= 1
        case Constraint.ALL:
            return specified == total
        case Constraint.ZERO_OR_ALL:
            return specified in (0, total)
    raise RuntimeError("unreachable")


class OptionGroup(metaclass=OptionType):
    """
    A named set of option back-references under a cardinality constraint.

    The group never owns its options: an option may belong to several
    groups and is registered with the registry on its own.
    """

    __introspectable__ = (
        "name",
        "constraint",
        "options",
    )

    def __new__(cls, name, constraint=Constraint.DEFAULT, /, *options):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        if not isinstance(constraint, Constraint):
            raise TypeError(f"{cls.__typename__} 'constraint' must be a constraint")

        self = super().__new__(cls)
        self._name = name
        self._constraint = constraint
        self._options = []
        return self.add(*options)

    def add(self, *options):
        """
        Append member options; returns the group to allow chaining.
        """
        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"{type(self).__typename__} members must be options")
            elif any(member is option for member in self._options):
                raise ValueError(f"{type(self).__typename__} {self.name!r} already contains option {option.display!r}")
            self._options.append(option)
        return self

    @property
    def specified(self):
        """
        Number of members seen at least once.
        """
        return sum(option.count > 0 for option in self._options)

    @property
    def satisfied(self):
        return _satisfied(self._constraint, self.specified, len(self._options))


__all__ = (
    # Policies
    "Occurrences",
    "Arguments",
    "Formatting",
    "Misc",
    "Constraint",

    # Value parsers
    "Converter",
    "MapParser",

    # Storage strategies
    "Scalar",
    "Container",

    # Specs
    "Option",
    "OptionGroup",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del OptionType
