"""
Response-file (argument-file) expansion.

A token of the form "@path" is replaced, in place, by the words of the file
at `path`. The scan resumes at the first inserted word, so response files may
reference further response files; a budget of expansions bounds the process
and turns self-inclusion into a fault instead of an endless loop.

Word splitting follows POSIX shell rules as implemented by shlex.split:
- words are separated by whitespace (newlines included);
- single quotes preserve everything literally;
- double quotes preserve everything but backslash escapes of \\, ", $, `
  and newline;
- a backslash outside quotes escapes the next character;
- '#' has no special meaning (there are no comments).

An unbalanced quote or a trailing backslash is reported as ResponseFileError.
Relative paths resolve against the current working directory.
"""
import logging
import shlex

from .faults import FaultCode, ResponseFileError, TooManyResponseFilesError, getdoc
from .utils import ordinal

logger = logging.getLogger(__name__)


def _words(path, index):
    try:
        with open(path, encoding="utf-8") as file:
            text = file.read()
    except (OSError, UnicodeDecodeError) as exception:
        raise ResponseFileError(
            "cannot read response file %r at %s position" % (path, ordinal(index)),
            title="unreadable response file",
            code=FaultCode.RESPONSE_FILE,
            input=path,
            index=index,
            exception=exception,
            hint="check that the file exists and is readable",
            docs=getdoc(FaultCode.RESPONSE_FILE),
        ) from exception

    try:
        return shlex.split(text)
    except ValueError as exception:
        raise ResponseFileError(
            "cannot split response file %r at %s position: %s" % (path, ordinal(index), str(exception).lower()),
            title="malformed response file",
            code=FaultCode.RESPONSE_FILE,
            input=path,
            index=index,
            exception=exception,
            hint="close every quotation and escape in the file",
            docs=getdoc(FaultCode.RESPONSE_FILE),
        ) from exception


def expand(tokens, /, limit=100):
    """
    Inline every "@path" token of `tokens`, recursively.

    Parameters
    - tokens: Iterable[str]
      The raw token stream; it is copied, never modified.
    - limit: int
      Maximum number of expansions; one more raises TooManyResponseFilesError.

    Returns
    - list[str]: the expanded token stream.

    Raises
    - ResponseFileError: a file cannot be read or split.
    - TooManyResponseFilesError: the expansion budget is exhausted.
    """
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise TypeError("expand() 'limit' must be an integer")
    elif limit < 0:
        raise ValueError("expand() 'limit' cannot be negative")

    tokens = list(tokens)
    remaining = limit
    index = 0

    while index < len(tokens):
        if not (token := tokens[index]).startswith("@"):
            index += 1
            continue

        if not remaining:
            raise TooManyResponseFilesError(
                "too many response files at %s position (more than %d expansions)" % (ordinal(index + 1), limit),
                title="too many response files",
                code=FaultCode.TOO_MANY_RESPONSE_FILES,
                input=token[1:],
                index=index + 1,
                hint="check the response files for references to themselves",
                docs=getdoc(FaultCode.TOO_MANY_RESPONSE_FILES),
            )
        remaining -= 1

        words = _words(token[1:], index + 1)
        logger.debug("expanded response file %r into %d tokens", token[1:], len(words))
        tokens[index:index + 1] = words

    return tokens


__all__ = (
    "expand",
)
