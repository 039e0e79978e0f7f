"""
Lazy, delimiter-driven string splitting.

Overview
- split(text, delimiter, predicate) yields substrings one at a time; nothing
  is computed until the consumer asks for the next token.
- Delimiters are strategies: given the rest of the text they return
  (position, length) of the next separator, or (-1, 0) when there is none.
  • LiteralDelimiter("|")  → splits on an exact substring.
  • AnyOfDelimiter(" \\t") → splits on any single character of a set.
  A plain string passed as delimiter is treated as a literal.
- Predicates decide what is kept: they receive the token and return the
  (possibly rewritten) token, or None to drop it.
  • keep_empty  → everything, including empty tokens (default).
  • skip_empty  → drops "".
  • skip_space  → drops tokens made only of whitespace.
  • trim        → strips whitespace and drops what becomes empty.

Edge cases
- Splitting "" yields a single "" token (with keep_empty).
- A trailing delimiter yields a trailing "" token: "a," → ["a", ""].
- An empty literal or an empty character set never matches, so the whole
  text comes back as one token.

Quick example:
    >>> list(split("a, b,,c", ",", trim))
    ['a', 'b', 'c']
    >>> split_once("key:value", ":")
    ('key', 'value')
"""
import re


class LiteralDelimiter:
    """
    Delimiter matching an exact substring.
    """
    __slots__ = ("needle",)

    def __init__(self, needle, /):
        if not isinstance(needle, str):
            raise TypeError("LiteralDelimiter() argument must be a string")
        self.needle = needle

    def __call__(self, text, /):
        if not self.needle or (index := text.find(self.needle)) < 0:
            return -1, 0
        return index, len(self.needle)

    def __repr__(self):
        return f"literal-delimiter({self.needle!r})"


class AnyOfDelimiter:
    """
    Delimiter matching any one character out of a set.
    """
    __slots__ = ("chars", "_pattern")

    def __init__(self, chars, /):
        if not isinstance(chars, str):
            raise TypeError("AnyOfDelimiter() argument must be a string")
        self.chars = chars
        self._pattern = re.compile("[%s]" % re.escape(chars)) if chars else None

    def __call__(self, text, /):
        if self._pattern is None or not (match := self._pattern.search(text)):
            return -1, 0
        return match.start(), 1

    def __repr__(self):
        return f"any-of-delimiter({self.chars!r})"


def keep_empty(token, /):
    return token


def skip_empty(token, /):
    return token if token else None


def skip_space(token, /):
    return token if token.strip() else None


def trim(token, /):
    return token.strip() or None


def _tokens(text, delimiter, predicate):
    position = 0
    while position is not None:
        rest = text[position:]
        index, length = delimiter(rest)
        if index < 0:
            # no further delimiter, the rest is the last token
            token, position = rest, None
        else:
            token, position = rest[:index], position + index + length
        if (token := predicate(token)) is not None:
            yield token


def split(text, delimiter=",", predicate=keep_empty, /):
    """
    Lazily split `text` into substrings.

    Parameters
    - text: str
      The source text.
    - delimiter: str | LiteralDelimiter | AnyOfDelimiter | Callable
      A string is wrapped into a LiteralDelimiter. Any callable following the
      (position, length) protocol is accepted.
    - predicate: Callable[[str], str | None]
      Keep/skip/rewrite policy applied to every token.

    Returns
    - Iterator[str]: a single-pass generator over the kept tokens.

    Raises
    - TypeError: when text is not a string or delimiter/predicate are not
      usable (checked eagerly, before iteration starts).
    """
    if not isinstance(text, str):
        raise TypeError("split() first argument must be a string")
    if isinstance(delimiter, str):
        delimiter = LiteralDelimiter(delimiter)
    if not callable(delimiter):
        raise TypeError("split() delimiter must be a string or a delimiter")
    if not callable(predicate):
        raise TypeError("split() predicate must be callable")
    return _tokens(text, delimiter, predicate)


def split_once(text, delimiter, /):
    """
    Split `text` at the first delimiter into (head, tail).

    When there is no delimiter, the tail is an empty string.
    """
    if not isinstance(text, str):
        raise TypeError("split_once() first argument must be a string")
    if isinstance(delimiter, str):
        delimiter = LiteralDelimiter(delimiter)
    index, length = delimiter(text)
    if index < 0:
        return text, ""
    return text[:index], text[index + length:]


__all__ = (
    "LiteralDelimiter",
    "AnyOfDelimiter",
    "keep_empty",
    "skip_empty",
    "skip_space",
    "trim",
    "split",
    "split_once",
)
