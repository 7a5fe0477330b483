from pydantic import BaseModel, Field

from .comparison import Comparison, Side
from .config import SimilarityMetric
from .language import Language
from .result import ComparisonResult


# One tile, positions are token indexes
class MatchSummary(BaseModel):
    start_first: int
    start_second: int
    length: int


# The full result between two submissions
class ComparisonSummary(BaseModel):
    first: str
    second: str
    similarity: float                    # Average, truncated to one decimal
    similarity_first: float
    similarity_second: float
    base_code_first: float = 0.0         # Share of each side explained by base code
    base_code_second: float = 0.0
    matched_tokens: int
    files_first: list[str]
    files_second: list[str]
    matches: list[MatchSummary]

    @classmethod
    def from_comparison(cls, comparison: Comparison) -> "ComparisonSummary":
        return cls(
            first=comparison.first.name,
            second=comparison.second.name,
            similarity=comparison.rounded_percent(),
            similarity_first=comparison.rounded_percent_a(),
            similarity_second=comparison.rounded_percent_b(),
            base_code_first=comparison.rounded_percent_base_code_a(),
            base_code_second=comparison.rounded_percent_base_code_b(),
            matched_tokens=comparison.number_of_matched_tokens,
            files_first=comparison.files(Side.FIRST),
            files_second=comparison.files(Side.SECOND),
            matches=[
                MatchSummary(start_first=m.start_a, start_second=m.start_b, length=m.length)
                for m in comparison.matches
            ],
        )


# Submitted sources keyed by relative file name
class SubmissionPayload(BaseModel):
    name: str = Field(min_length=1)
    files: dict[str, str]


class CompareRequest(BaseModel):
    language: str = Language.PYTHON.value  # Resolved through the tokenizer registry
    min_token_match: int | None = Field(default=None, ge=1)
    similarity_threshold: float = Field(default=0.0, ge=0.0, le=100.0)
    similarity_metric: SimilarityMetric = SimilarityMetric.AVG
    submissions: list[SubmissionPayload]
    base_code: SubmissionPayload | None = None
    limit: int | None = Field(default=None, ge=1)  # Cap on returned comparisons


class CompareResponse(BaseModel):
    duration_ms: int
    number_of_submissions: int
    errors: list[str]
    distribution: list[int]
    comparisons: list[ComparisonSummary]

    @classmethod
    def from_result(cls, result: ComparisonResult, errors: list[str], limit: int | None = None) -> "CompareResponse":
        return cls(
            duration_ms=result.duration_ms,
            number_of_submissions=result.number_of_submissions,
            errors=errors,
            distribution=result.similarity_distribution(),
            comparisons=[ComparisonSummary.from_comparison(c) for c in result.ranked(limit)],
        )
