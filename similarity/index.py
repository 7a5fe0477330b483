"""
Window hash index over a token type sequence.

Every start position whose window of `window` token types contains no
boundary token gets a rolling Karp-Rabin fingerprint; the table maps each
fingerprint to the ascending list of start positions sharing it. The index
only narrows down candidates: callers must still compare the real types.
"""
from collections import defaultdict
from typing import Hashable, Sequence

HASH_BASE = 263
HASH_MOD = (1 << 61) - 1


def _type_code(token_type: Hashable) -> int:
    return hash(token_type) % HASH_MOD


class HashIndex:
    """Fingerprints of all windows of one sequence plus the reverse table."""

    def __init__(self, types: Sequence[Hashable], window: int, excluded: Sequence[bool] | None = None):
        if window < 1:
            raise ValueError(f"window must be positive, got {window}")
        self.window = window
        self.size = len(types)
        self.hashes: list[int | None] = [None] * self.size
        self.table: dict[int, list[int]] = defaultdict(list)

        num_windows = self.size - window + 1
        if num_windows <= 0:
            return

        # blocked[i]: number of excluded positions before i
        blocked = [0] * (self.size + 1)
        for i in range(self.size):
            blocked[i + 1] = blocked[i] + (1 if excluded is not None and excluded[i] else 0)

        codes = [_type_code(t) for t in types]
        top = pow(HASH_BASE, window - 1, HASH_MOD)

        value = 0
        for i in range(window):
            value = (value * HASH_BASE + codes[i]) % HASH_MOD

        for start in range(num_windows):
            if start > 0:
                value = (value - codes[start - 1] * top) % HASH_MOD
                value = (value * HASH_BASE + codes[start + window - 1]) % HASH_MOD
            if blocked[start + window] - blocked[start] == 0:
                self.hashes[start] = value
                self.table[value].append(start)

        self.table = dict(self.table)

    def candidates(self, fingerprint: int | None) -> list[int]:
        """Start positions whose window has the given fingerprint."""
        if fingerprint is None:
            return []
        return self.table.get(fingerprint, [])
