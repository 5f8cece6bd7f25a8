"""Delimiter-set tokenizer for proc file lines."""

from collections.abc import Iterator


class TokenCursor:
    """
    Cursor over a line of text that yields delimiter-separated tokens.

    Delimiters are a set of characters: any run of them separates two tokens
    and empty tokens are never produced. Each call to next_token() consumes
    the text up to and including the delimiter that ends the returned token.
    Once exhausted the cursor keeps returning None.
    """

    __slots__ = ("_text", "_delimiters")

    def __init__(self, text: str, delimiters: str) -> None:
        """
        Initialize the cursor.

        Args:
            text: The text to tokenize.
            delimiters: Characters that separate tokens.
        """
        self._text: str | None = text
        self._delimiters = frozenset(delimiters)

    @property
    def exhausted(self) -> bool:
        """Check if the cursor has no more tokens to give."""
        return self._text is None

    @property
    def rest(self) -> str | None:
        """Unconsumed text following the last returned token."""
        return self._text

    def next_token(self) -> str | None:
        """Return the next token, or None when the cursor is exhausted."""
        text = self._text
        if text is None:
            return None

        start = 0
        while start < len(text) and text[start] in self._delimiters:
            start += 1
        end = start
        while end < len(text) and text[end] not in self._delimiters:
            end += 1

        if end == start:
            self._text = None
            return None

        if end == len(text):
            # Last token in the text
            self._text = None
        else:
            # Skip the delimiter that terminates this token
            self._text = text[end + 1 :]
        return text[start:end]

    def __iter__(self) -> Iterator[str]:
        while (token := self.next_token()) is not None:
            yield token


def tokenize(text: str, delimiters: str) -> list[str]:
    """Split text into all of its tokens."""
    return list(TokenCursor(text, delimiters))
