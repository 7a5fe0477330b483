"""
Tokenizer front ends.

A front end turns the files of a submission into a TokenStream whose token
types are what the tiling engine compares. Front ends are registered per
Language and created through `get_tokenizer`.
"""
import io
import keyword
import logging
import re
import tokenize
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from .errors import ExitError, ExitCode, TokenizationError
from .tokens import FILE_END, Token, TokenStream

logger = logging.getLogger(__name__)


class Language(str, Enum):
    """Languages with a built-in front end."""
    PYTHON = "python"
    TEXT = "text"


class Tokenizer(ABC):
    """Interface of a language front end."""
    name: str = ""
    suffixes: list[str] = []
    default_min_token_match: int = 9

    def tokenize(self, root: Path | None, files: list[str]) -> TokenStream:
        """
        Read and tokenize the files of one submission.

        Args:
            root: Submission directory the file paths are relative to
            files: Relative file paths, tokenized in this order

        Raises:
            TokenizationError: if a file cannot be read or tokenized
        """
        base = root or Path(".")
        sources = {}
        for name in files:
            try:
                sources[name] = (base / name).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise TokenizationError(f"cannot read file: {e}", file=name) from e
        return self.tokenize_sources(sources)

    def tokenize_sources(self, sources: dict[str, str]) -> TokenStream:
        """Tokenize in-memory sources; every file is closed by a FILE_END token."""
        stream = TokenStream()
        for name, text in sources.items():
            last_line = 1
            for token in self.tokenize_file(name, text):
                stream.append(token)
                last_line = token.line
            stream.append(Token(FILE_END, name, last_line))
        return stream

    @abstractmethod
    def tokenize_file(self, name: str, text: str) -> list[Token]:
        """Tokens of one file, without the closing FILE_END."""


class PythonTokenizer(Tokenizer):
    """
    Python front end on top of the standard `tokenize` module.

    Keywords and operators keep their text as type, so `if` and `while`
    differ, while identifiers and literals collapse to their category and
    renaming variables does not hide a copy.
    """
    name = "Python"
    suffixes = [".py"]
    default_min_token_match = 12

    _SKIPPED = {
        tokenize.COMMENT,
        tokenize.NL,
        tokenize.ENCODING,
        tokenize.ENDMARKER,
    }

    def tokenize_file(self, name: str, text: str) -> list[Token]:
        result = []
        try:
            for tok in tokenize.generate_tokens(io.StringIO(text).readline):
                if tok.type in self._SKIPPED:
                    continue
                result.append(Token(
                    type=self._token_type(tok),
                    file=name,
                    line=tok.start[0],
                    column=tok.start[1] + 1,
                    length=len(tok.string),
                ))
        except (tokenize.TokenError, SyntaxError) as e:
            raise TokenizationError(f"Python tokenizer failed: {e}", file=name) from e
        return result

    @staticmethod
    def _token_type(tok: tokenize.TokenInfo) -> str:
        if tok.type == tokenize.NAME:
            if keyword.iskeyword(tok.string) or keyword.issoftkeyword(tok.string):
                return tok.string
            return "NAME"
        if tok.type == tokenize.OP:
            return tok.string
        if tok.type == tokenize.NEWLINE:
            return "NEWLINE"
        return tokenize.tok_name[tok.type]


class TextTokenizer(Tokenizer):
    """Plain text front end: lower-cased words and punctuation marks."""
    name = "Text"
    suffixes = [".txt", ".md", ".asc", ".tex"]
    default_min_token_match = 5

    _WORD = re.compile(r"\w+|[^\w\s]")

    def tokenize_file(self, name: str, text: str) -> list[Token]:
        result = []
        for line_no, line in enumerate(text.splitlines(), start=1):
            for m in self._WORD.finditer(line):
                result.append(Token(
                    type=m.group(0).lower(),
                    file=name,
                    line=line_no,
                    column=m.start() + 1,
                    length=len(m.group(0)),
                ))
        return result


TOKENIZERS: dict[Language, type[Tokenizer]] = {
    Language.PYTHON: PythonTokenizer,
    Language.TEXT: TextTokenizer,
}


def get_tokenizer(language: Language | str) -> Tokenizer:
    """
    Create the front end for a language.

    Raises:
        ExitError: if no front end is registered for the language
    """
    try:
        language = Language(language)
        tokenizer = TOKENIZERS[language]()
    except (ValueError, KeyError) as e:
        raise ExitError(f"Language instantiation failed: {language}", ExitCode.BAD_LANGUAGE) from e
    logger.info(f"Initialized language {tokenizer.name}")
    return tokenizer
