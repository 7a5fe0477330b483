"""
Greedy String Tiling.

Finds the tiles between two token streams: repeatedly take the longest run
of equal, not yet covered tokens (ties go to the earliest position in the
first stream, then in the second), cover it on both sides and continue until
no run of at least the minimum match length is left. The tiling is greedy,
not optimal.

Candidate runs are looked up through a HashIndex over windows of the
minimum match length. Each index is built once per token stream and cached,
so `prepare` must run before comparisons are spread over threads.
"""
import logging
from typing import Hashable, Sequence

from .comparison import Comparison
from .index import HashIndex
from .match import Match
from .submission import Submission
from .tokens import TokenStream

logger = logging.getLogger(__name__)


class GreedyStringTiling:
    """Tiling engine for a fixed minimum match length."""

    def __init__(self, min_match_length: int):
        if min_match_length < 1:
            raise ValueError(f"min_match_length must be at least 1, got {min_match_length}")
        self.min_match_length = min_match_length
        self._indexes: dict[int, tuple[TokenStream, HashIndex]] = {}

    def index(self, tokens: TokenStream) -> HashIndex:
        """Hash index of a stream, built on first use."""
        cached = self._indexes.get(id(tokens))
        if cached is not None and cached[0] is tokens:
            return cached[1]
        index = HashIndex(tokens.types(), self.min_match_length, [t.is_boundary for t in tokens])
        self._indexes[id(tokens)] = (tokens, index)
        return index

    def clear(self) -> None:
        """Drop all cached indexes."""
        self._indexes.clear()

    def prepare(self, submissions: list[Submission]) -> None:
        for submission in submissions:
            if submission.tokens is not None:
                self.index(submission.tokens)

    def compare(
        self,
        first: Submission,
        second: Submission,
        base_code_a: Comparison | None = None,
        base_code_b: Comparison | None = None
    ) -> Comparison:
        """
        Tile two submissions.

        Tokens covered by a base-code match set are excluded from tiling; the
        sets are attached to the returned comparison.
        """
        comparison = Comparison(first, second, base_code_a=base_code_a, base_code_b=base_code_b)
        self._fill(comparison, _initial_marks(first, base_code_a), _initial_marks(second, base_code_b))
        return comparison

    def compare_with_base_code(self, submission: Submission, base_code: Submission) -> Comparison:
        """Tile a submission against the base code; the result is its base-code match set."""
        comparison = Comparison(submission, base_code)
        self._fill(comparison, _initial_marks(submission, None), _initial_marks(base_code, None))
        return comparison

    def _fill(self, comparison: Comparison, marked_first: bytearray, marked_second: bytearray) -> None:
        first, second = comparison.first, comparison.second
        if first.tokens is None or second.tokens is None:
            raise ValueError(f"cannot compare {comparison}: submission without tokens")

        # Ties resolve earliest in first, then in second
        for tile in self._tiles(first.tokens, second.tokens, marked_first, marked_second):
            comparison.add_match(tile.start_a, tile.start_b, tile.length)

    def _tiles(
        self,
        a: TokenStream,
        b: TokenStream,
        marked_a: bytearray,
        marked_b: bytearray
    ) -> list[Match]:
        mml = self.min_match_length
        size_a, size_b = a.size(), b.size()
        if size_a < mml or size_b < mml:
            return []

        types_a, types_b = a.types(), b.types()
        hashes_a = self.index(a).hashes
        index_b = self.index(b)
        tiles: list[Match] = []

        while True:
            max_match = mml
            found: list[Match] = []

            for x in range(size_a - mml + 1):
                if x + max_match > size_a:
                    break
                if marked_a[x]:
                    continue
                for y in index_b.candidates(hashes_a[x]):
                    if marked_b[y] or y + max_match > size_b:
                        continue
                    if not _window_matches(types_a, types_b, marked_a, marked_b, x, y, max_match):
                        continue

                    length = max_match
                    while (x + length < size_a and y + length < size_b
                           and types_a[x + length] == types_b[y + length]
                           and not marked_a[x + length] and not marked_b[y + length]):
                        length += 1

                    if length > max_match:
                        found.clear()
                        max_match = length
                    candidate = Match(x, y, length)
                    if not any(tile.overlaps(candidate) for tile in found):
                        found.append(candidate)

            if not found:
                break

            for tile in found:
                marked_a[tile.start_a:tile.end_a] = b"\x01" * tile.length
                marked_b[tile.start_b:tile.end_b] = b"\x01" * tile.length
                tiles.append(tile)
            logger.debug(f"Round with tile length {max_match}: {len(found)} tile(s)")

            # Everything of exactly the minimum length was taken in this round
            if max_match == mml:
                break

        return tiles


def _initial_marks(submission: Submission, base_code: Comparison | None) -> bytearray:
    """Boundary tokens and base-code tokens start out covered."""
    marked = bytearray(1 if token.is_boundary else 0 for token in submission.tokens or ())
    if base_code is not None:
        for match in base_code.matches:
            marked[match.start_a:match.end_a] = b"\x01" * match.length
    return marked


def _window_matches(
    types_a: Sequence[Hashable],
    types_b: Sequence[Hashable],
    marked_a: bytearray,
    marked_b: bytearray,
    x: int,
    y: int,
    length: int
) -> bool:
    for k in range(length - 1, -1, -1):
        if types_a[x + k] != types_b[y + k] or marked_a[x + k] or marked_b[y + k]:
            return False
    return True
