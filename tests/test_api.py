"""
Tests for the HTTP API in main.py
"""
from fastapi.testclient import TestClient

from main import app
from conftest import STACK_PY, TOTAL_PY, TOTAL_RENAMED_PY

client = TestClient(app)

BROKEN_PY = 's = """never closed\n'


def submission(name, source, file="main.py"):
    return {"name": name, "files": {file: source}}


def test_health():
    """
    /health answers with the available languages.
    """
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "languages": ["python", "text"]}


def test_compare_finds_renamed_copy():
    """
    A copy with renamed identifiers is reported at 100%.
    """
    response = client.post("/compare", json={
        "submissions": [
            submission("alice", TOTAL_PY),
            submission("bob", TOTAL_RENAMED_PY),
            submission("carol", STACK_PY, "stack.py"),
        ],
    })
    assert response.status_code == 200
    data = response.json()
    assert data["number_of_submissions"] == 3
    assert data["errors"] == []

    best = data["comparisons"][0]
    assert (best["first"], best["second"]) == ("alice", "bob")
    assert best["similarity"] == 100.0
    assert best["files_first"] == ["main.py"]
    assert best["matches"] == [{"start_first": 0, "start_second": 0, "length": 36}]
    assert sum(data["distribution"]) == len(data["comparisons"])


def test_compare_limit():
    """
    limit caps the number of returned comparisons.
    """
    response = client.post("/compare", json={
        "submissions": [submission(name, TOTAL_PY) for name in ("a", "b", "c")],
        "limit": 1,
    })
    assert response.status_code == 200
    assert len(response.json()["comparisons"]) == 1


def test_compare_reports_broken_submission():
    """
    A submission the front end rejects is listed in errors, the rest is compared.
    """
    response = client.post("/compare", json={
        "submissions": [
            submission("alice", TOTAL_PY),
            submission("bob", TOTAL_PY),
            submission("dave", BROKEN_PY),
        ],
    })
    assert response.status_code == 200
    data = response.json()
    assert any(error.startswith("[dave]") for error in data["errors"])
    assert [(c["first"], c["second"]) for c in data["comparisons"]] == [("alice", "bob")]


def test_compare_with_base_code():
    """
    Submissions that only contain the base code are not reported.
    """
    response = client.post("/compare", json={
        "submissions": [submission("alice", TOTAL_PY), submission("bob", TOTAL_RENAMED_PY)],
        "base_code": submission("template", TOTAL_PY),
    })
    assert response.status_code == 200
    assert response.json()["comparisons"] == []


def test_compare_text_language():
    """
    Text submissions are compared word by word.
    """
    response = client.post("/compare", json={
        "language": "text",
        "submissions": [
            submission("a", "The quick brown fox jumps over the lazy dog.", "essay.txt"),
            submission("b", "the quick brown fox jumps over the lazy dog", "essay.txt"),
        ],
    })
    assert response.status_code == 200
    assert response.json()["comparisons"][0]["matched_tokens"] == 9


def test_compare_duplicate_names():
    """
    Submission names must be unique.
    """
    response = client.post("/compare", json={
        "submissions": [submission("alice", TOTAL_PY), submission("alice", STACK_PY)],
    })
    assert response.status_code == 400


def test_compare_unknown_language():
    """
    An unsupported language is a bad request.
    """
    response = client.post("/compare", json={
        "language": "cobol",
        "submissions": [submission("alice", TOTAL_PY), submission("bob", TOTAL_PY)],
    })
    assert response.status_code == 400


def test_compare_not_enough_submissions():
    """
    Fewer than two valid submissions abort the run with 422.
    """
    response = client.post("/compare", json={
        "submissions": [submission("alice", TOTAL_PY), submission("dave", BROKEN_PY)],
    })
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "not_enough_submissions"
    assert any(error.startswith("[dave]") for error in detail["errors"])


def test_compare_invalid_payload():
    """
    Request validation rejects empty submission names.
    """
    response = client.post("/compare", json={
        "submissions": [submission("", TOTAL_PY)],
    })
    assert response.status_code == 422
