"""
Submissions and their discovery on disk.

A submission is one entry of the root directory (a directory or a single
file). Its files are tokenized by a front end into a TokenStream; a
submission that cannot be tokenized keeps `tokens=None` and is left out of
every comparison.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import ExitError, ExitCode, TokenizationError
from .tokens import Token, TokenStream

if TYPE_CHECKING:
    from .language import Tokenizer

logger = logging.getLogger(__name__)

# Streams shorter than this are never compared
MIN_SUBMISSION_TOKENS = 3


@dataclass
class RunContext:
    """Errors and counters collected while parsing the submissions of one run."""
    current_submission: str = "<unknown submission>"
    errors: list[str] = field(default_factory=list)
    parsed: int = 0
    failed: int = 0
    invalid: int = 0  # Parsed, but fewer tokens than the minimum match length

    def add_error(self, message: str) -> None:
        self.errors.append(f"[{self.current_submission}] {message}")
        logger.warning(f"{self.current_submission}: {message}")

    @property
    def valid(self) -> int:
        return self.parsed - self.failed - self.invalid


@dataclass
class Submission:
    """One submission: a name, its files and, once parsed, its tokens."""
    name: str
    root: Path | None = None
    files: list[str] = field(default_factory=list)  # Relative to root
    tokens: TokenStream | None = None
    has_errors: bool = False

    @classmethod
    def from_tokens(
        cls,
        name: str,
        tokens: TokenStream | list[Token],
        files: list[str] | None = None
    ) -> "Submission":
        """Wrap an already tokenized submission."""
        if not isinstance(tokens, TokenStream):
            tokens = TokenStream(tokens)
        return cls(name=name, files=list(files or []), tokens=tokens)

    @classmethod
    def from_sources(
        cls,
        name: str,
        sources: dict[str, str],
        tokenizer: "Tokenizer",
        context: RunContext | None = None
    ) -> "Submission":
        """Tokenize in-memory sources keyed by relative file name."""
        submission = cls(name=name, files=sorted(sources))
        ordered = {file: sources[file] for file in submission.files}
        submission._tokenize(lambda: tokenizer.tokenize_sources(ordered), context or RunContext())
        return submission

    @property
    def number_of_tokens(self) -> int:
        if self.tokens is None:
            return 0
        return self.tokens.size()

    @property
    def file_count(self) -> int:
        return len(self.files)

    def parse(self, tokenizer: "Tokenizer", context: RunContext) -> bool:
        """
        Tokenize all files of this submission.

        Returns:
            True if a usable token stream was produced. On failure the error is
            recorded in the context and the submission is invalidated.
        """
        if not self.files:
            context.add_error(f"nothing to parse for submission \"{self.name}\"")
            self.tokens = None
            self.has_errors = True
            return False
        return self._tokenize(lambda: tokenizer.tokenize(self.root, self.files), context)

    def invalidate(self) -> None:
        self.tokens = None
        self.has_errors = True

    def _tokenize(self, produce, context: RunContext) -> bool:
        try:
            self.tokens = produce()
        except TokenizationError as e:
            where = f" ({e.file})" if e.file else ""
            context.add_error(f"{e}{where}")
            self.invalidate()
            return False

        if self.tokens.size() < MIN_SUBMISSION_TOKENS:
            context.add_error(f"Submission \"{self.name}\" is too short!")
            self.invalidate()
            return False
        return True

    def __lt__(self, other: "Submission") -> bool:
        return self.name < other.name

    def __str__(self) -> str:
        return self.name


def is_excluded(path: Path, excluded_names: set[str] | None) -> bool:
    """A path is excluded when its name ends with one of the excluded names."""
    if not excluded_names:
        return False
    return any(path.name.endswith(name) for name in excluded_names)


def has_valid_suffix(path: Path, suffixes: list[str] | None) -> bool:
    """Without configured suffixes every file is accepted."""
    if not suffixes:
        return True
    return any(path.name.endswith(suffix) for suffix in suffixes)


def collect_files(
    path: Path,
    suffixes: list[str] | None = None,
    excluded_names: set[str] | None = None
) -> list[Path]:
    """
    Recursively collect the files of one submission.

    A single valid file is returned as a one-element list. Directory entries
    are visited in name order so token streams are reproducible.
    """
    if is_excluded(path, excluded_names):
        return []
    if path.is_file():
        return [path] if has_valid_suffix(path, suffixes) else []
    if not path.is_dir():
        return []

    files = []
    for child in sorted(path.iterdir()):
        files.extend(collect_files(child, suffixes, excluded_names))
    return files


def read_exclusion_file(path: Path | None) -> set[str] | None:
    """Read file names to exclude, one per line. Unreadable files exclude nothing."""
    if path is None:
        return None
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        logger.warning(f"Could not read exclusion file {path}: {e}")
        return None
    return {line.strip() for line in lines if line.strip()}


def find_submissions(
    root_dir: Path,
    suffixes: list[str] | None = None,
    excluded_names: set[str] | None = None,
    subdirectory: str | None = None,
    base_code: str | None = None
) -> tuple[list[Submission], Submission | None]:
    """
    Map the entries of the root directory to submissions.

    Args:
        root_dir: Directory holding one entry per submission
        suffixes: Accepted file suffixes (None accepts all)
        excluded_names: Entries/files whose name ends with one of these are ignored
        subdirectory: If set, only this subdirectory of each directory entry is used
        base_code: Name of the entry holding the base code

    Returns:
        Tuple of (submissions sorted by name, base code submission or None)

    Raises:
        ExitError: if a directory entry lacks the configured subdirectory
    """
    submissions = []
    base_code_submission = None

    for entry in sorted(root_dir.iterdir(), key=lambda p: p.name):
        if is_excluded(entry, excluded_names):
            logger.info(f"Exclude submission: {entry.name}")
            continue
        if entry.is_file() and not has_valid_suffix(entry, suffixes):
            logger.info(f"Ignore submission with invalid suffix: {entry.name}")
            continue

        submission_path = entry
        if entry.is_dir() and subdirectory:
            submission_path = entry / subdirectory
            if not submission_path.exists():
                raise ExitError(
                    f"Submission {entry.name} does not contain the given subdirectory '{subdirectory}'",
                    ExitCode.BAD_PARAMETER,
                )
            if not submission_path.is_dir():
                raise ExitError(
                    f"The given subdirectory '{subdirectory}' is not a directory!",
                    ExitCode.BAD_PARAMETER,
                )

        root = submission_path if submission_path.is_dir() else submission_path.parent
        files = [
            f.relative_to(root).as_posix()
            for f in collect_files(submission_path, suffixes, excluded_names)
        ]
        submission = Submission(name=entry.name, root=root, files=files)

        if base_code is not None and entry.name == base_code:
            base_code_submission = submission
        else:
            submissions.append(submission)

    return submissions, base_code_submission
