"""
Result of comparing two submissions.

A Comparison owns the non-overlapping tiles found between two submissions
and derives the similarity percentages from them. Percentages shown to
users are truncated (not rounded) to one decimal place.
"""
from dataclasses import dataclass, field
from enum import Enum

from .match import Match
from .submission import Submission


class Side(Enum):
    """Which submission of a comparison a question is about."""
    FIRST = "first"
    SECOND = "second"


def truncate_percent(percent: float) -> float:
    """
    Truncate a percentage toward zero to one decimal place.

    Examples:
        >>> truncate_percent(88.13559)
        88.1
        >>> truncate_percent(99.99)
        99.9
    """
    return int(percent * 10) / 10


@dataclass(eq=False)
class Comparison:
    """All tiles between two submissions plus the derived similarity values."""
    first: Submission
    second: Submission
    matches: list[Match] = field(default_factory=list)
    base_code_a: "Comparison | None" = None  # first vs. base code
    base_code_b: "Comparison | None" = None  # second vs. base code

    def add_match(self, start_a: int, start_b: int, length: int) -> bool:
        """
        Add a tile unless it overlaps an existing one.

        Returns:
            True if the tile was added, False if it was dropped

        Raises:
            IndexError: if the tile reaches outside either token stream
        """
        if start_a + length > self.first.number_of_tokens or start_b + length > self.second.number_of_tokens:
            raise IndexError(
                f"match ({start_a}, {start_b}, {length}) outside of {self.first.name} "
                f"({self.first.number_of_tokens} tokens) / {self.second.name} "
                f"({self.second.number_of_tokens} tokens)"
            )
        candidate = Match(start_a, start_b, length)
        if any(match.overlaps(candidate) for match in self.matches):
            return False
        self.matches.append(candidate)
        return True

    @property
    def number_of_matched_tokens(self) -> int:
        return sum(match.length for match in self.matches)

    def biggest_match(self) -> int:
        return max((match.length for match in self.matches), default=0)

    def _base_code_tokens(self, side: Side) -> int | None:
        base = self.base_code_a if side is Side.FIRST else self.base_code_b
        if base is None:
            return None
        return base.number_of_matched_tokens

    def _submission(self, side: Side) -> Submission:
        return self.first if side is Side.FIRST else self.second

    def effective_size(self, side: Side) -> int:
        """Tokens minus one boundary token per file minus base-code tokens."""
        submission = self._submission(side)
        size = submission.number_of_tokens - submission.file_count
        base = self._base_code_tokens(side)
        if base is not None:
            size -= base
        return size

    def percent(self) -> float:
        """Average similarity of both submissions."""
        divisor = self.effective_size(Side.FIRST) + self.effective_size(Side.SECOND)
        if divisor == 0:
            return 0.0
        return (200 * self.number_of_matched_tokens) / divisor

    def percent_a(self) -> float:
        divisor = self.effective_size(Side.FIRST)
        return 0.0 if divisor == 0 else self.number_of_matched_tokens * 100 / divisor

    def percent_b(self) -> float:
        divisor = self.effective_size(Side.SECOND)
        return 0.0 if divisor == 0 else self.number_of_matched_tokens * 100 / divisor

    def percent_max(self) -> float:
        return max(self.percent_a(), self.percent_b())

    def percent_min(self) -> float:
        return min(self.percent_a(), self.percent_b())

    def rounded_percent(self) -> float:
        return truncate_percent(self.percent())

    def rounded_percent_a(self) -> float:
        return truncate_percent(self.percent_a())

    def rounded_percent_b(self) -> float:
        return truncate_percent(self.percent_b())

    def rounded_percent_max(self) -> float:
        return truncate_percent(self.percent_max())

    def rounded_percent_min(self) -> float:
        return truncate_percent(self.percent_min())

    def _percent_base_code(self, side: Side) -> float:
        base = self._base_code_tokens(side)
        submission = self._submission(side)
        divisor = submission.number_of_tokens - submission.file_count
        if base is None or divisor == 0:
            return 0.0
        return base * 100 / divisor

    def percent_base_code_a(self) -> float:
        return self._percent_base_code(Side.FIRST)

    def percent_base_code_b(self) -> float:
        return self._percent_base_code(Side.SECOND)

    def rounded_percent_base_code_a(self) -> float:
        return truncate_percent(self.percent_base_code_a())

    def rounded_percent_base_code_b(self) -> float:
        return truncate_percent(self.percent_base_code_b())

    def files(self, side: Side) -> list[str]:
        """Sorted names of the files touched by at least one tile on one side."""
        tokens = self._submission(side).tokens
        if tokens is None:
            return []
        touched = set()
        for match in self.matches:
            start = match.start_a if side is Side.FIRST else match.start_b
            for index in range(start, start + match.length):
                touched.add(tokens.get(index).file)
        return sorted(touched)

    def sort_permutation(self, side: Side) -> list[int]:
        """Indices into `matches` ordered by their start on the given side."""
        if side is Side.FIRST:
            return sorted(range(len(self.matches)), key=lambda i: self.matches[i].start_a)
        return sorted(range(len(self.matches)), key=lambda i: self.matches[i].start_b)

    def color(self, length: int) -> str:
        """
        Red shade for a tile: the longer relative to the biggest tile, the redder.

        Examples:
            >>> c = Comparison(Submission("a"), Submission("b"), [Match(0, 0, 10)])
            >>> c.color(10), c.color(5)
            ('#ff0000', '#7f0000')
        """
        biggest = self.biggest_match()
        if biggest == 0:
            return "#000000"
        return f"#{255 * length // biggest:02x}0000"

    @staticmethod
    def sort_key(comparison: "Comparison") -> float:
        """Key for ranking: descending by overall similarity, ties keep order."""
        return -comparison.percent()

    def __str__(self) -> str:
        return f"{self.first.name} <-> {self.second.name}"
