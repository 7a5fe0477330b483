"""
Tests for similarity/detector.py

Runs the detector end to end over submission trees written to tmp_path.
"""
import pytest

from similarity.config import ComparisonMode, DetectorOptions
from similarity.detector import SimilarityDetector
from similarity.errors import ExitCode, ExitError
from similarity.language import PythonTokenizer
from similarity.submission import Submission
from similarity.tokens import TokenStream

from conftest import STACK_PY, TOTAL_PY, TOTAL_RENAMED_PY


def pair_names(result):
    return [(c.first.name, c.second.name) for c in result.ranked()]


@pytest.fixture
def course_tree(write_tree):
    """Five submissions: two copies, one original, one broken, one empty."""
    root = write_tree({
        "alice/main.py": TOTAL_PY,
        "bob/main.py": TOTAL_RENAMED_PY,
        "carol/stack.py": STACK_PY,
        "dave/bad.py": 's = """never closed\n',
        "dave/notes.txt": "ignored",
    })
    (root / "erin").mkdir()
    return root


class TestRun:
    """Tests for a complete run over a directory."""

    def test_copied_submission_is_found(self, course_tree):
        detector = SimilarityDetector(DetectorOptions(root_dir=course_tree))
        result = detector.run()

        best = result.ranked()[0]
        assert (best.first.name, best.second.name) == ("alice", "bob")
        assert best.rounded_percent() == 100.0
        assert result.number_of_submissions == 3

    def test_broken_submissions_are_reported_not_fatal(self, course_tree):
        detector = SimilarityDetector(DetectorOptions(root_dir=course_tree))
        result = detector.run()

        assert detector.context.parsed == 5
        assert detector.context.failed == 2
        assert detector.context.valid == 3
        assert any(error.startswith("[dave]") for error in detector.context.errors)
        assert any(error.startswith("[erin]") for error in detector.context.errors)
        for first, second in pair_names(result):
            assert {first, second}.isdisjoint({"dave", "erin"})

    def test_language_defaults_applied(self, course_tree):
        detector = SimilarityDetector(DetectorOptions(root_dir=course_tree))
        assert detector.options.min_token_match == 12
        assert detector.options.file_suffixes == [".py"]
        assert detector.greedy_string_tiling.min_match_length == 12

    def test_explicit_options_win(self, course_tree):
        options = DetectorOptions(root_dir=course_tree, min_token_match=20, file_suffixes=[".py", ".txt"])
        detector = SimilarityDetector(options)
        assert detector.options.min_token_match == 20
        assert detector.options.file_suffixes == [".py", ".txt"]

    def test_parallel_mode_gives_same_result(self, course_tree):
        normal = SimilarityDetector(DetectorOptions(root_dir=course_tree)).run()
        parallel = SimilarityDetector(
            DetectorOptions(root_dir=course_tree, comparison_mode=ComparisonMode.PARALLEL, workers=2)
        ).run()
        assert pair_names(parallel) == pair_names(normal)
        assert [c.percent() for c in parallel.ranked()] == [c.percent() for c in normal.ranked()]

    def test_text_language(self, write_tree):
        root = write_tree({
            "a.txt": "The quick brown fox jumps over the lazy dog.",
            "b.txt": "the QUICK brown fox jumps over the lazy dog!",
            "c.txt": "Completely different words appear in this essay.",
        })
        detector = SimilarityDetector(DetectorOptions(root_dir=root, language="text"))
        result = detector.run()

        assert detector.options.min_token_match == 5
        assert pair_names(result) == [("a.txt", "b.txt")]
        assert result.ranked()[0].number_of_matched_tokens == 9


class TestMinimumTokens:
    """Submissions shorter than the minimum match length are left out."""

    def test_below_minimum_match_length(self, write_tree):
        root = write_tree({
            "alice/main.py": TOTAL_PY,
            "bob/main.py": TOTAL_PY,
            "carol/stack.py": STACK_PY,
            "dan/stack.py": STACK_PY,
        })
        detector = SimilarityDetector(DetectorOptions(root_dir=root, min_token_match=40))
        result = detector.run()

        assert pair_names(result) == [("carol", "dan")]
        assert detector.context.invalid == 2
        assert any("fewer tokens than minimum match length" in e for e in detector.context.errors)

    def test_compare_prebuilt_submissions(self):
        detector = SimilarityDetector(DetectorOptions(min_token_match=3))
        submissions = [
            Submission.from_tokens("a", TokenStream.from_types(list("abcdef"))),
            Submission.from_tokens("short", TokenStream.from_types(list("ab"))),
            Submission.from_tokens("b", TokenStream.from_types(list("abcdef"))),
        ]
        result = detector.compare(submissions)

        assert pair_names(result) == [("a", "b")]
        assert result.ranked()[0].percent() == 100.0
        assert submissions[1].has_errors
        assert detector.context.failed == 1


class TestBaseCode:
    """Tests for runs with a base code entry."""

    def test_base_code_is_not_reported(self, write_tree):
        combined = TOTAL_PY + "\n" + STACK_PY
        root = write_tree({
            "template/main.py": TOTAL_PY,
            "alice/main.py": combined,
            "bob/main.py": combined,
        })
        detector = SimilarityDetector(DetectorOptions(root_dir=root, base_code="template"))
        result = detector.run()

        assert result.number_of_submissions == 2
        comparison = result.ranked()[0]
        assert comparison.rounded_percent() == 100.0
        assert 0.0 < comparison.rounded_percent_base_code_a() < 100.0
        assert comparison.number_of_matched_tokens < comparison.first.number_of_tokens - 1

    def test_submissions_made_only_of_base_code(self, write_tree):
        root = write_tree({
            "template/main.py": TOTAL_PY,
            "alice/main.py": TOTAL_PY,
            "bob/main.py": TOTAL_RENAMED_PY,
        })
        result = SimilarityDetector(DetectorOptions(root_dir=root, base_code="template")).run()
        assert len(result) == 0

    def test_missing_base_code(self, write_tree):
        root = write_tree({"alice/main.py": TOTAL_PY, "bob/main.py": TOTAL_PY})
        with pytest.raises(ExitError) as exc_info:
            SimilarityDetector(DetectorOptions(root_dir=root, base_code="template"))
        assert exc_info.value.code == ExitCode.BAD_PARAMETER

    def test_unparsable_base_code(self, write_tree):
        root = write_tree({
            "template/main.py": 's = """never closed\n',
            "alice/main.py": TOTAL_PY,
            "bob/main.py": TOTAL_PY,
        })
        detector = SimilarityDetector(DetectorOptions(root_dir=root, base_code="template"))
        with pytest.raises(ExitError) as exc_info:
            detector.run()
        assert exc_info.value.code == ExitCode.PARSE_FAILURE


class TestFatalErrors:
    """Run-level problems raise ExitError before any comparison."""

    def test_missing_root_directory(self, tmp_path):
        detector = SimilarityDetector(DetectorOptions(root_dir=tmp_path / "missing"))
        with pytest.raises(ExitError) as exc_info:
            detector.run()
        assert exc_info.value.code == ExitCode.BAD_PARAMETER

    def test_not_enough_submissions(self, write_tree):
        root = write_tree({"alice/main.py": TOTAL_PY, "dave/bad.py": 's = """never closed\n'})
        detector = SimilarityDetector(DetectorOptions(root_dir=root))
        with pytest.raises(ExitError) as exc_info:
            detector.run()
        assert exc_info.value.code == ExitCode.NOT_ENOUGH_SUBMISSIONS
        assert "found 1 valid" in exc_info.value.message

    def test_out_of_memory(self, write_tree, monkeypatch):
        root = write_tree({"alice/main.py": TOTAL_PY, "bob/main.py": TOTAL_PY})

        def exhausted(self, root, files):
            raise MemoryError()

        monkeypatch.setattr(PythonTokenizer, "tokenize", exhausted)
        detector = SimilarityDetector(DetectorOptions(root_dir=root))
        with pytest.raises(ExitError) as exc_info:
            detector.run()
        assert exc_info.value.code == ExitCode.OUT_OF_MEMORY

    def test_unknown_language(self):
        with pytest.raises(ExitError) as exc_info:
            SimilarityDetector(DetectorOptions.model_construct(language="cobol"))
        assert exc_info.value.code == ExitCode.BAD_LANGUAGE
