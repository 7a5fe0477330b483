"""
Similarity detection run.

This module provides the SimilarityDetector class that drives a whole run:
discovering submissions, tokenizing them, dropping the unusable ones and
handing the rest to the configured comparison strategy.
"""
import logging
import time

from .config import DetectorOptions
from .errors import ExitError, ExitCode
from .gst import GreedyStringTiling
from .language import Tokenizer, get_tokenizer
from .result import ComparisonResult
from .strategy import ComparisonStrategy, create_strategy
from .submission import (
    MIN_SUBMISSION_TOKENS,
    RunContext,
    Submission,
    find_submissions,
    read_exclusion_file,
)

logger = logging.getLogger(__name__)


class SimilarityDetector:
    """
    Runs similarity detection over a set of submissions.

    Submission-level problems are collected in `context` and never abort the
    run; run-level problems raise ExitError before any comparison is made.
    """

    def __init__(self, options: DetectorOptions, tokenizer: Tokenizer | None = None):
        """
        Initialize the detector.

        Args:
            options: Detector options; open values are filled from the language defaults
            tokenizer: Front end to use instead of the one registered for options.language

        Raises:
            ExitError: if the language or the base-code option is unusable
        """
        self.tokenizer = tokenizer or get_tokenizer(options.language)
        self.options = options.with_language_defaults(self.tokenizer)
        self.greedy_string_tiling = GreedyStringTiling(self.options.min_token_match)
        self.strategy: ComparisonStrategy = create_strategy(self.options, self.greedy_string_tiling)
        self.context = RunContext()
        self._check_base_code_option()

    def run(self) -> ComparisonResult:
        """
        Discover, parse and compare the submissions below options.root_dir.

        Raises:
            ExitError: if the root directory is unusable, the base code cannot be
                parsed or fewer than two valid submissions remain
        """
        root_dir = self.options.root_dir
        if root_dir is None or not root_dir.exists():
            raise ExitError(f"Root directory {root_dir} does not exist!", ExitCode.BAD_PARAMETER)
        if not root_dir.is_dir():
            raise ExitError(f"{root_dir} is not a directory!", ExitCode.BAD_PARAMETER)

        excluded = read_exclusion_file(self.options.exclusion_file)
        submissions, base_code = find_submissions(
            root_dir,
            suffixes=self.options.file_suffixes,
            excluded_names=excluded,
            subdirectory=self.options.subdirectory,
            base_code=self.options.base_code,
        )
        if self.options.has_base_code and base_code is None:
            raise ExitError(
                f"Basecode directory \"{root_dir / self.options.base_code}\" doesn't exist!",
                ExitCode.BAD_PARAMETER,
            )

        self.parse_submissions(submissions)
        if base_code is not None:
            self.parse_base_code(base_code)
        return self._compare_valid(submissions, base_code)

    def compare(self, submissions: list[Submission], base_code: Submission | None = None) -> ComparisonResult:
        """
        Compare submissions that were already tokenized (or failed to).

        Submissions with fewer tokens than the minimum match length are removed
        the same way as in `run`.
        """
        for submission in submissions:
            self.context.current_submission = submission.name
            self.context.parsed += 1
            if submission.tokens is None or submission.has_errors:
                self.context.failed += 1
                continue
            self._check_token_count(submission)
        if base_code is not None:
            self._check_base_code_tokens(base_code)
        return self._compare_valid(submissions, base_code)

    def parse_submissions(self, submissions: list[Submission]) -> None:
        """Tokenize all submissions, recording failures in the run context."""
        started = time.perf_counter()
        for submission in submissions:
            self.context.current_submission = submission.name
            logger.debug(f"------ Parsing submission: {submission.name}")
            try:
                ok = submission.parse(self.tokenizer, self.context)
            except MemoryError as e:
                raise ExitError(
                    f"Out of memory during parsing of submission \"{submission.name}\"",
                    ExitCode.OUT_OF_MEMORY,
                ) from e
            self.context.parsed += 1
            if not ok:
                self.context.failed += 1
                continue
            self._check_token_count(submission)

        elapsed = time.perf_counter() - started
        logger.info(
            f"{self.context.valid} submissions parsed successfully, "
            f"{self.context.failed} parser error(s), "
            f"{self.context.invalid} below minimum match length ({elapsed:.2f} s)"
        )

    def parse_base_code(self, base_code: Submission) -> None:
        """
        Tokenize the base code.

        Raises:
            ExitError: if the base code cannot be used
        """
        self.context.current_submission = base_code.name
        logger.info(f"----- Parsing basecode submission: {base_code.name}")
        try:
            ok = base_code.parse(self.tokenizer, self.context)
        except MemoryError as e:
            raise ExitError(
                f"Out of memory during parsing of submission \"{base_code.name}\"",
                ExitCode.OUT_OF_MEMORY,
            ) from e
        if not ok:
            self._log_errors()
            raise ExitError("Bad basecode submission", ExitCode.PARSE_FAILURE)
        self._check_base_code_tokens(base_code)

    def _check_token_count(self, submission: Submission) -> None:
        if submission.number_of_tokens < MIN_SUBMISSION_TOKENS:
            self.context.add_error(f"Submission \"{submission.name}\" is too short!")
            submission.invalidate()
            self.context.failed += 1
        elif submission.number_of_tokens < self.options.min_token_match:
            self.context.add_error("Submission contains fewer tokens than minimum match length allows!")
            submission.invalidate()
            self.context.invalid += 1

    def _check_base_code_tokens(self, base_code: Submission) -> None:
        if base_code.tokens is None or base_code.number_of_tokens < self.options.min_token_match:
            raise ExitError(
                "Basecode submission contains fewer tokens than minimum match length allows!",
                ExitCode.PARSE_FAILURE,
            )

    def _check_base_code_option(self) -> None:
        if not self.options.has_base_code or self.options.root_dir is None:
            return
        if not self.options.root_dir.exists():
            raise ExitError(f"Root directory \"{self.options.root_dir}\" doesn't exist!", ExitCode.BAD_PARAMETER)

        base_code_path = self.options.root_dir / self.options.base_code
        if not base_code_path.exists():
            raise ExitError(f"Basecode directory \"{base_code_path}\" doesn't exist!", ExitCode.BAD_PARAMETER)
        if self.options.subdirectory and not (base_code_path / self.options.subdirectory).exists():
            raise ExitError(
                f"Basecode directory doesn't contain the subdirectory \"{self.options.subdirectory}\"!",
                ExitCode.BAD_PARAMETER,
            )
        logger.info(f"Basecode directory \"{base_code_path}\" will be used")

    def _compare_valid(self, submissions: list[Submission], base_code: Submission | None) -> ComparisonResult:
        valid = [s for s in submissions if not s.has_errors and s.tokens is not None]
        if len(valid) < 2:
            self._log_errors()
            raise ExitError(
                f"Not enough valid submissions! (found {len(valid)} valid submissions)",
                ExitCode.NOT_ENOUGH_SUBMISSIONS,
            )
        if self.context.errors:
            self._log_errors()
        return self.strategy.compare_submissions(valid, base_code)

    def _log_errors(self) -> None:
        for error in self.context.errors:
            logger.error(error)
