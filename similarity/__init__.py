"""
Token-based similarity detection for source code submissions.

This package contains the parts of a detection run:
- tokens: Token and TokenStream produced by front ends
- match: tiles between two token streams
- comparison: tiles of one pair of submissions and the similarity values
- index: window hash index used to find candidate tiles
- gst: Greedy String Tiling engine
- config: detector options and their YAML loader
- result: comparisons kept by one run
- strategy: pairwise comparison of a whole submission set
- language: tokenizer front ends
- submission: submissions, discovery on disk and per-run error collection
- detector: driver for a complete run
"""

from .errors import (
    ExitCode,
    ExitError,
    TokenizationError,
)

from .tokens import (
    Token,
    TokenStream,
    FILE_END,
    SEPARATOR,
)

from .match import Match

from .comparison import (
    Comparison,
    Side,
    truncate_percent,
)

from .index import HashIndex

from .gst import GreedyStringTiling

from .config import (
    DetectorOptions,
    ComparisonMode,
    SimilarityMetric,
    load_options,
)

from .result import ComparisonResult

from .strategy import (
    ComparisonStrategy,
    NormalComparisonStrategy,
    ParallelComparisonStrategy,
    create_strategy,
)

from .language import (
    Language,
    Tokenizer,
    PythonTokenizer,
    TextTokenizer,
    get_tokenizer,
)

from .submission import (
    Submission,
    RunContext,
    find_submissions,
    collect_files,
)

from .detector import SimilarityDetector

__all__ = [
    # errors
    "ExitCode",
    "ExitError",
    "TokenizationError",
    # tokens
    "Token",
    "TokenStream",
    "FILE_END",
    "SEPARATOR",
    # match
    "Match",
    # comparison
    "Comparison",
    "Side",
    "truncate_percent",
    # index
    "HashIndex",
    # gst
    "GreedyStringTiling",
    # config
    "DetectorOptions",
    "ComparisonMode",
    "SimilarityMetric",
    "load_options",
    # result
    "ComparisonResult",
    # strategy
    "ComparisonStrategy",
    "NormalComparisonStrategy",
    "ParallelComparisonStrategy",
    "create_strategy",
    # language
    "Language",
    "Tokenizer",
    "PythonTokenizer",
    "TextTokenizer",
    "get_tokenizer",
    # submission
    "Submission",
    "RunContext",
    "find_submissions",
    "collect_files",
    # detector
    "SimilarityDetector",
]
