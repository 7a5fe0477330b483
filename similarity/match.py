"""
Tiles found between two token streams.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Match:
    """
    A tile: `length` tokens starting at `start_a` in the first stream that
    have the same types as `length` tokens starting at `start_b` in the second.

    Examples:
        >>> Match(0, 0, 3).overlaps(Match(2, 10, 3))
        True
        >>> Match(0, 0, 3).overlaps(Match(3, 3, 3))
        False
    """
    start_a: int
    start_b: int
    length: int

    def __post_init__(self):
        if self.length < 1:
            raise ValueError(f"match length must be positive, got {self.length}")
        if self.start_a < 0 or self.start_b < 0:
            raise ValueError(f"match starts must be non-negative, got ({self.start_a}, {self.start_b})")

    @property
    def end_a(self) -> int:
        return self.start_a + self.length

    @property
    def end_b(self) -> int:
        return self.start_b + self.length

    def overlaps(self, other: "Match") -> bool:
        """
        True if both matches cover a common position in either stream.

        Only ranges of the same stream are compared: an A-range is never
        checked against a B-range.
        """
        if self.start_a < other.start_a:
            if other.start_a - self.start_a < self.length:
                return True
        elif self.start_a - other.start_a < other.length:
            return True

        if self.start_b < other.start_b:
            if other.start_b - self.start_b < self.length:
                return True
        elif self.start_b - other.start_b < other.length:
            return True

        return False
