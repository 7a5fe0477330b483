"""
Result of one detection run.
"""
from dataclasses import dataclass, field

from .comparison import Comparison
from .config import DetectorOptions


@dataclass(frozen=True)
class ComparisonResult:
    """Comparisons above the similarity threshold plus run metadata."""
    comparisons: list[Comparison]
    duration_ms: int
    number_of_submissions: int
    options: DetectorOptions = field(default_factory=DetectorOptions)

    def ranked(self, limit: int | None = None) -> list[Comparison]:
        """
        Comparisons by descending overall similarity.

        Equal percentages keep their original order.
        """
        ranked = sorted(self.comparisons, key=Comparison.sort_key)
        if limit is not None:
            ranked = ranked[:max(limit, 0)]
        return ranked

    def similarity_distribution(self) -> list[int]:
        """
        Number of comparisons per 10% similarity bucket.

        Bucket i counts percentages in [10*i, 10*(i+1)); 100% falls into the
        last bucket.
        """
        distribution = [0] * 10
        for comparison in self.comparisons:
            bucket = min(int(comparison.percent() // 10), 9)
            distribution[max(bucket, 0)] += 1
        return distribution

    def __len__(self) -> int:
        return len(self.comparisons)
