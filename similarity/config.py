"""
Detector configuration.

Options are a pydantic model so they can come straight from a parsed YAML
file (hyphenated keys, like the course configs) or from keyword arguments.
"""
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ExitError, ExitCode
from .language import Language, Tokenizer


class ComparisonMode(str, Enum):
    """How the pairwise stage is executed."""
    NORMAL = "normal"      # One pair after another
    PARALLEL = "parallel"  # Pairs spread over a thread pool


class SimilarityMetric(str, Enum):
    """Which similarity value is compared against the threshold."""
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class DetectorOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    root_dir: Path | None = Field(default=None, alias="root-dir")
    language: Language = Language.PYTHON

    # Detection tuning
    min_token_match: int | None = Field(default=None, ge=1, alias="min-token-match")  # None = language default
    similarity_threshold: float = Field(default=0.0, ge=0.0, le=100.0, alias="similarity-threshold")
    similarity_metric: SimilarityMetric = Field(default=SimilarityMetric.AVG, alias="similarity-metric")

    # Submission discovery
    base_code: str | None = Field(default=None, alias="base-code")  # Root entry holding the template code
    subdirectory: str | None = None
    exclusion_file: Path | None = Field(default=None, alias="exclusion-file")
    file_suffixes: list[str] | None = Field(default=None, alias="file-suffixes")

    # Execution
    comparison_mode: ComparisonMode = Field(default=ComparisonMode.NORMAL, alias="comparison-mode")
    workers: int = Field(default=4, ge=1)

    @property
    def has_base_code(self) -> bool:
        return bool(self.base_code)

    def with_language_defaults(self, tokenizer: Tokenizer) -> "DetectorOptions":
        """Fill options the user left open from the front end's defaults."""
        update = {}
        if self.min_token_match is None:
            update["min_token_match"] = tokenizer.default_min_token_match
        if self.file_suffixes is None:
            update["file_suffixes"] = list(tokenizer.suffixes)
        return self.model_copy(update=update)


def load_options(path: Path | str) -> DetectorOptions:
    """
    Load detector options from a YAML file.

    The options may sit at the top level or under a `similarity:` key.

    Raises:
        ExitError: if the file cannot be read or does not hold valid options
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ExitError(f"Cannot read options from {path}: {e}", ExitCode.BAD_PARAMETER) from e

    if not isinstance(data, dict):
        raise ExitError(f"Options file {path} must contain a mapping", ExitCode.BAD_PARAMETER)
    if isinstance(data.get("similarity"), dict):
        data = data["similarity"]

    try:
        return DetectorOptions.model_validate(data)
    except ValidationError as e:
        raise ExitError(f"Invalid options in {path}: {e}", ExitCode.BAD_PARAMETER) from e
