"""
Token model for tokenized submissions.

A front end turns the files of one submission into a TokenStream. Positions
in the stream are what matches refer to, so the stream is append-only and
is never reordered.
"""
from dataclasses import dataclass, replace
from typing import Any, Hashable, Iterator


# Reserved token types. Front ends emit FILE_END once after every file;
# tokens of these types never become part of a tile.
FILE_END = "FILE_END"
SEPARATOR = "SEPARATOR"

BOUNDARY_TYPES = frozenset({FILE_END, SEPARATOR})


@dataclass(frozen=True)
class Token:
    """A single token produced by a front end."""
    type: Hashable  # Front-end defined; equal types match
    file: str       # Path of the source file relative to the submission
    line: int
    column: int = -1
    length: int = 0

    @property
    def is_boundary(self) -> bool:
        return self.type in BOUNDARY_TYPES


class TokenStream:
    """
    Ordered token list of one submission.

    Line numbers never decrease within a file: a token reporting a lower
    line than the last token appended for its file is stored with the line
    clamped to that value.

    Examples:
        >>> stream = TokenStream()
        >>> stream.append(Token("NAME", "a.py", 3))
        >>> stream.append(Token("OP", "a.py", 2))
        >>> stream.get(1).line
        3
    """

    def __init__(self, tokens: list[Token] | None = None):
        self._tokens: list[Token] = []
        self._last_line: dict[str, int] = {}
        for token in tokens or ():
            self.append(token)

    @classmethod
    def from_types(cls, types: list[Any], file: str = "<memory>") -> "TokenStream":
        """Build a single-file stream with one token per line from bare types."""
        return cls([Token(t, file, line) for line, t in enumerate(types, start=1)])

    def append(self, token: Token) -> None:
        last = self._last_line.get(token.file)
        if last is not None and token.line < last:
            token = replace(token, line=last)
        self._last_line[token.file] = token.line
        self._tokens.append(token)

    def size(self) -> int:
        return len(self._tokens)

    def get(self, index: int) -> Token:
        if index < 0 or index >= len(self._tokens):
            raise IndexError(f"token index {index} out of range for stream of size {len(self._tokens)}")
        return self._tokens[index]

    def types(self) -> list[Hashable]:
        return [token.type for token in self._tokens]

    def files(self) -> list[str]:
        """Distinct files in order of first appearance."""
        return list(dict.fromkeys(token.file for token in self._tokens))

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> Token:
        return self.get(index)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return f"TokenStream(size={len(self._tokens)})"
