"""
Switchyard parse session: one pass of a token stream through a registry.

Phases
- expansion (optional): "@file" tokens are inlined (see switchyard.responses).
- dispatch: every token is classified and routed.
  1. the first "--" switches every later token to positional handling;
  2. tokens without a leading dash, the bare "-", and everything after "--"
     go to the next positional that still accepts an occurrence;
  3. anything else loses one dash (two for the long form) and is tried as an
     exact alias, then as "name=value", then as the longest prefix alias,
     and finally (short form only) as a cluster of grouping options.
- group validation: every non-default group constraint is checked.
- final check: every required option and positional must have been seen.

Fault policy
- deferred (accumulate): each fault is recorded and the rest of the current
  token is abandoned; dispatch resumes at the next token.
- stop-first: the first fault ends the session.
- response-file faults end the session in both modes.
"""
import copy
import difflib
import logging
from typing import NamedTuple

from . import responses
from .faults import *
from .options import Arguments, Formatting, Misc, Constraint
from .strings import split, split_once
from .utils import *

logger = logging.getLogger(__name__)


class Outcome(NamedTuple):
    """
    Result of a parse: truthy when it succeeded.
    """
    success: bool
    faults: tuple
    unrecognized: tuple

    def __bool__(self):
        return self.success


def _dashed(alias):
    return ("-" if len(alias) == 1 else "--") + alias


# group constraint → the requirement, phrased for messages
_requirements = {
    Constraint.ZERO: "no option of group %r may be specified",
    Constraint.ZERO_OR_ONE: "at most one option of group %r may be specified",
    Constraint.ONE: "exactly one option of group %r must be specified",
    Constraint.ONE_OR_MORE: "at least one option of group %r must be specified",
    Constraint.ALL: "every option of group %r must be specified",
    Constraint.ZERO_OR_ALL: "either none or every option of group %r must be specified",
}


class Session:
    """
    Mutable state of a single parse.

    State
    - tokens: the (expanded) token list and a cursor on the next token.
    - position: 1-based position of the token being dispatched.
    - positional cursor: index into the registry positional list.
    - dashdash: whether "--" (or a consume-after positional) was seen.
    - faults and unrecognized tokens collected so far.
    """

    def __init__(self, registry, /):
        self._registry = registry
        self._tokens = []
        self._cursor = 0
        self._position = 0
        self._positional = 0
        self._positionals = registry.positionals
        self._dashdash = False
        self._faults = []
        self._unrecognized = []

    def run(self, tokens, /, *, expand=False):
        """
        Drive every phase over `tokens` and return the Outcome.
        """
        try:
            if expand:
                tokens = responses.expand(tokens, self._registry.limit)
            self._tokens = list(tokens)
            self._dispatch()
            self._validate()
            if not self._registry.allow_missing:
                self._check()
        except ParseException as fault:
            self._faults.append(self._contextualize(fault))

        logger.debug("parsed %d tokens with %d faults", len(self._tokens), len(self._faults))
        return Outcome(not self._faults, tuple(self._faults), tuple(self._unrecognized))

    def _contextualize(self, fault):
        return copy.replace(
            fault,
            prog=self._registry.prog,
            colorful=self._registry.colorful,
            fancy=self._registry.fancy,
        )

    def trigger(self, fault, /):
        """
        Record `fault` (deferred mode) or raise it to end the session.
        """
        fault = self._contextualize(fault)
        logger.debug("fault %s: %s", fault.code.name, fault)
        if not self._registry.deferred:
            raise fault
        self._faults.append(fault)

    def _steal(self):
        if self._cursor >= len(self._tokens):
            return Unset
        token = self._tokens[self._cursor]
        self._cursor += 1
        return token

    def _dispatch(self):
        while self._cursor < len(self._tokens):
            token = self._tokens[self._cursor]
            self._cursor += 1
            self._position = self._cursor

            if token == "--" and not self._dashdash:
                self._dashdash = True
            elif self._dashdash or token == "-" or not token.startswith("-"):
                self._handle_positional(token)
            else:
                self._handle_named(token)

    def _handle_positional(self, token):
        while self._positional < len(self._positionals):
            if (option := self._positionals[self._positional]).occurrence_allowed:
                break
            self._positional += 1
        else:
            return self.trigger(UnhandledPositionalError(
                "unexpected positional argument %r at %s position" % (token, ordinal(self._position)),
                title="unexpected positional argument",
                code=FaultCode.UNHANDLED_POSITIONAL,
                input=token,
                index=self._position,
                hint="remove the extra argument or put it after a matching option",
                docs=getdoc(FaultCode.UNHANDLED_POSITIONAL),
            ))

        logger.debug("token %r at position %d is positional %r", token, self._position, option.name)
        self._store(option, option.name, token)
        if option.flags & Misc.CONSUME_AFTER:
            self._dashdash = True

    def _handle_named(self, token):
        if long := token.startswith("--"):
            stripped = token[2:]
        else:
            stripped = token[1:]

        if match := self._match_option(stripped) or self._match_prefix(stripped):
            option, alias, value = match
            logger.debug("token %r at position %d is option %r", token, self._position, option.display)
            return self._acquire(option, alias, value)

        if not long and (cluster := self._match_cluster(stripped)):
            logger.debug("token %r at position %d is a cluster", token, self._position)
            return self._handle_cluster(stripped, cluster)

        if self._registry.allow_unknown:
            self._unrecognized.append(token)
            return

        suggestions = difflib.get_close_matches(stripped, self._registry.options.keys(), 5)
        try:
            hint = "did you mean %r?" % _dashed(suggestions[0])
        except IndexError:
            hint = "check the spelling of the option"
        return self.trigger(UnknownOptionError(
            "unknown option %r at %s position" % (token, ordinal(self._position)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=token,
            index=self._position,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        ))

    def _match_option(self, stripped):
        """
        Exact alias, then "name=value".

        A PREFIX option keeps the '=' as part of its value; every other
        option receives only what follows it.
        """
        if option := self._registry.resolve(stripped):
            return option, stripped, Unset

        if "=" not in stripped:
            return None

        name, rest = split_once(stripped, "=")
        if option := self._registry.resolve(name):
            return option, name, "=" + rest if option.formatting is Formatting.PREFIX else rest
        return None

    def _match_prefix(self, stripped):
        for length in range(min(self._registry.max_prefix_length, len(stripped)), 0, -1):
            if (option := self._registry.resolve(name := stripped[:length])) and option.prefix:
                return option, name, stripped[length:]
        return None

    def _match_cluster(self, stripped):
        cluster = []
        for char in stripped:
            if not (option := self._registry.resolve(char)) or option.formatting is not Formatting.GROUPING:
                return None
            cluster.append(option)
        return cluster

    def _handle_cluster(self, stripped, cluster):
        for char, option in zip(stripped[:-1], cluster[:-1]):
            if option.arguments is Arguments.REQUIRED:
                return self.trigger(MissingArgumentInGroupError(
                    "option %r in cluster %r at %s position requires a value" % (
                        _dashed(char), "-" + stripped, ordinal(self._position)
                    ),
                    title="missing value in cluster",
                    code=FaultCode.MISSING_ARGUMENT_IN_GROUP,
                    input=char,
                    index=self._position,
                    cluster=stripped,
                    hint="move %r to the end of the cluster or pass it on its own" % _dashed(char),
                    docs=getdoc(FaultCode.MISSING_ARGUMENT_IN_GROUP),
                ))

        for char, option in zip(stripped, cluster):
            # a fault in deferred mode abandons the rest of the cluster
            if not self._acquire(option, char, Unset):
                return

    def _acquire(self, option, alias, value):
        """
        Value acquisition for a named option.

        `value` is Unset when the token carried no inline value; in that case a
        required value is taken from the next token (never for strict PREFIX
        options, whose value must be attached).

        Returns whether the occurrence was stored.
        """
        if value is Unset:
            if option.arguments is Arguments.REQUIRED:
                if option.formatting is Formatting.PREFIX or (value := self._steal()) is Unset:
                    return self.trigger(MissingArgumentError(
                        "option %r at %s position requires a value" % (_dashed(alias), ordinal(self._position)),
                        title="missing value",
                        code=FaultCode.MISSING_ARGUMENT,
                        input=alias,
                        index=self._position,
                        hint=(
                            "attach the value directly (for example: %s<%s>)"
                            if option.formatting is Formatting.PREFIX else
                            "pass a value after it (for example: %s <%s>)"
                        ) % (_dashed(alias), option.label),
                        docs=getdoc(FaultCode.MISSING_ARGUMENT),
                    ))
            else:
                value = ""
        elif option.arguments is Arguments.DISALLOWED:
            return self.trigger(UnexpectedArgumentError(
                "option %r at %s position does not take a value" % (_dashed(alias), ordinal(self._position)),
                title="unexpected value",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                input=alias,
                index=self._position,
                value=value,
                hint="remove the value (for example: %s)" % _dashed(alias),
                docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
            ))

        return self._store(option, alias, value)

    def _store(self, option, alias, value):
        if not option.occurrence_allowed:
            return self.trigger(AlreadySpecifiedError(
                "option %r at %s position was already provided" % (
                    _dashed(alias) if option.formatting is not Formatting.POSITIONAL else alias,
                    ordinal(self._position)
                ),
                title="option already provided",
                code=FaultCode.ALREADY_SPECIFIED,
                input=alias,
                index=self._position,
                hint="pass %r only once" % option.display,
                docs=getdoc(FaultCode.ALREADY_SPECIFIED),
            ))

        pieces = split(value, ",") if option.flags & Misc.COMMA_SEPARATED else (value,)
        for piece in pieces:
            try:
                parsed = option.parser(alias, piece)
            except Exception as exception:
                if allowed := getattr(option.parser, "allowed", tuple)():
                    hint = "use one of: %s" % ", ".join(map(repr, allowed))
                else:
                    hint = str(exception).lower() or "check the value of %r" % option.display
                return self.trigger(InvalidArgumentError(
                    "invalid value %r for option %r at %s position" % (piece, alias, ordinal(self._position)),
                    title="invalid value",
                    code=FaultCode.INVALID_ARGUMENT,
                    input=alias,
                    index=self._position,
                    value=piece,
                    exception=exception,
                    hint=hint,
                    docs=getdoc(FaultCode.INVALID_ARGUMENT),
                ))
            option._record(parsed)
        return True

    def _validate(self):
        for group in self._registry.groups.values():
            if group.constraint is Constraint.DEFAULT or group.satisfied:
                continue
            specified = group.specified
            self.trigger(GroupConstraintError(
                (_requirements[group.constraint] + ", got %d %s") % (
                    group.name, specified, "option" if specified == 1 else pluralize("option")
                ),
                title="group constraint violated",
                code=FaultCode.GROUP_CONSTRAINT,
                input=group.name,
                constraint=group.constraint,
                specified=specified,
                hint="group %r contains: %s" % (
                    group.name, ", ".join(option.display for option in group.options)
                ),
                docs=getdoc(FaultCode.GROUP_CONSTRAINT),
            ))

    def _check(self):
        for option in (*self._registry.unique_options(), *self._positionals):
            if not option.occurrence_required:
                continue
            positional = option.formatting is Formatting.POSITIONAL
            self.trigger(MissingRequiredOptionError(
                "%s %r is required but was not provided" % (
                    "positional argument" if positional else "option", option.display
                ),
                title="missing required %s" % ("positional argument" if positional else "option"),
                code=FaultCode.MISSING_REQUIRED_OPTION,
                input=option.display,
                hint="pass a value for %r" % option.display,
                docs=getdoc(FaultCode.MISSING_REQUIRED_OPTION),
            ))


__all__ = (
    "Outcome",
    "Session",
)
