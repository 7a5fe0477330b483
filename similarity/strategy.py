"""
Comparison strategies: run the tiling engine over all pairs of submissions.

Both strategies first compare every submission with the base code (if any),
then compare every unordered pair of submissions that has a token stream and
keep the comparisons above the similarity threshold.
"""
import concurrent.futures
import logging
import time
from abc import ABC, abstractmethod

from .comparison import Comparison
from .config import ComparisonMode, DetectorOptions, SimilarityMetric
from .gst import GreedyStringTiling
from .result import ComparisonResult
from .submission import MIN_SUBMISSION_TOKENS, Submission

logger = logging.getLogger(__name__)


class ComparisonStrategy(ABC):
    """Base class of the pairwise comparison stage."""

    def __init__(self, options: DetectorOptions, greedy_string_tiling: GreedyStringTiling):
        self.options = options
        self.greedy_string_tiling = greedy_string_tiling
        self.base_code_matches: dict[str, Comparison] = {}

    @abstractmethod
    def compare_submissions(
        self,
        submissions: list[Submission],
        base_code: Submission | None = None
    ) -> ComparisonResult:
        """Compare all pairs of submissions and return the kept comparisons."""

    def compare_submissions_to_base_code(self, submissions: list[Submission], base_code: Submission) -> None:
        """Build the base-code match set of every submission that has tokens."""
        self.base_code_matches = {}
        for submission in submissions:
            if submission.tokens is None:
                continue
            comparison = self.greedy_string_tiling.compare_with_base_code(submission, base_code)
            self.base_code_matches[submission.name] = comparison
            logger.debug(f"Base code in {submission.name}: {comparison.rounded_percent_base_code_a()}%")

    def similarity(self, comparison: Comparison) -> float:
        metric = self.options.similarity_metric
        if metric == SimilarityMetric.MIN:
            return comparison.percent_min()
        if metric == SimilarityMetric.MAX:
            return comparison.percent_max()
        return comparison.percent()

    def is_above_similarity_threshold(self, comparison: Comparison) -> bool:
        return self.similarity(comparison) > self.options.similarity_threshold

    def compare_pair(self, first: Submission, second: Submission) -> Comparison | None:
        """Tile one pair; None if it does not pass the threshold."""
        comparison = self.greedy_string_tiling.compare(
            first,
            second,
            base_code_a=self.base_code_matches.get(first.name),
            base_code_b=self.base_code_matches.get(second.name),
        )
        logger.debug(f"Comparing {first.name}-{second.name}: {comparison.percent()}")
        if self.is_above_similarity_threshold(comparison):
            return comparison
        return None

    def _prepare(self, submissions: list[Submission], base_code: Submission | None) -> list[tuple[Submission, Submission]]:
        # Indexes of an earlier run are not reused
        self.greedy_string_tiling.clear()
        if base_code is not None:
            self.compare_submissions_to_base_code(submissions, base_code)
        else:
            self.base_code_matches = {}
        self.greedy_string_tiling.prepare(submissions)

        comparable = [s for s in submissions if s.number_of_tokens >= MIN_SUBMISSION_TOKENS]
        return [
            (comparable[i], comparable[j])
            for i in range(len(comparable) - 1)
            for j in range(i + 1, len(comparable))
        ]

    def _result(self, comparisons: list[Comparison], started: float, number_of_submissions: int) -> ComparisonResult:
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"Compared {number_of_submissions} submissions in {duration_ms} ms, "
            f"{len(comparisons)} comparison(s) above {self.options.similarity_threshold}%"
        )
        return ComparisonResult(
            comparisons=comparisons,
            duration_ms=duration_ms,
            number_of_submissions=number_of_submissions,
            options=self.options,
        )


class NormalComparisonStrategy(ComparisonStrategy):
    """Compares the pairs one after another."""

    def compare_submissions(
        self,
        submissions: list[Submission],
        base_code: Submission | None = None
    ) -> ComparisonResult:
        started = time.perf_counter()
        comparisons = []
        for first, second in self._prepare(submissions, base_code):
            comparison = self.compare_pair(first, second)
            if comparison is not None:
                comparisons.append(comparison)
        return self._result(comparisons, started, len(submissions))


class ParallelComparisonStrategy(ComparisonStrategy):
    """
    Spreads the pairs over a thread pool.

    Token streams, hash indexes and base-code match sets are complete before
    the pool starts and only read by the workers. Results are gathered in
    pair order, so the outcome equals the one of NormalComparisonStrategy.
    """

    def compare_submissions(
        self,
        submissions: list[Submission],
        base_code: Submission | None = None
    ) -> ComparisonResult:
        started = time.perf_counter()
        pairs = self._prepare(submissions, base_code)

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.options.workers) as executor:
            futures = [executor.submit(self.compare_pair, first, second) for first, second in pairs]
            comparisons = [c for c in (future.result() for future in futures) if c is not None]

        return self._result(comparisons, started, len(submissions))


STRATEGIES: dict[ComparisonMode, type[ComparisonStrategy]] = {
    ComparisonMode.NORMAL: NormalComparisonStrategy,
    ComparisonMode.PARALLEL: ParallelComparisonStrategy,
}


def create_strategy(options: DetectorOptions, greedy_string_tiling: GreedyStringTiling) -> ComparisonStrategy:
    return STRATEGIES[ComparisonMode(options.comparison_mode)](options, greedy_string_tiling)
