"""Unit test configuration - shared indices and an HTTP client over an injected serving state"""

import io
import json
import os
import tempfile
import zipfile

import pytest

# Set env vars BEFORE importing zipsearch.main
# main.py configures logging at module level (on import)
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.mkdtemp(prefix="zipsearch-logs-"), "zipsearch.log"))
os.environ.setdefault("ZIPSEARCH_STATIC_DIR", os.path.join(tempfile.gettempdir(), "zipsearch-no-static"))

from zipsearch.bm25 import build_index
from zipsearch.serving import ServingState


@pytest.fixture
def two_doc_index():
    """
    doc_a: ["a/b", "c"] → a, b, c (length 3)
    doc_b: ["a/b"]      → a, b    (length 2)
    """
    return build_index([
        ("doc_a", ["a/b", "c"]),
        ("doc_b", ["a/b"]),
    ])


@pytest.fixture
def project_index():
    """Small collection of Java-ish project archives"""
    return build_index([
        ("md5_lombok", ["lombok/", "lombok/AUTHORS", "lombok/README.md", "lombok/src/Main.java"]),
        ("md5_guava", ["guava/", "guava/README.md", "guava/src/Main.java", "guava/src/Cache.java"]),
        ("md5_docs", ["docs/", "docs/README.md"]),
        ("md5_misc", ["AUTHORS", "LICENSE", "Makefile"]),
    ])


@pytest.fixture
def records_file(tmp_path):
    """JSON-lines build input with three archives"""
    path = tmp_path / "records.jsonl"
    records = [
        {"name": "md5_1", "files": ["a/b", "c"]},
        {"name": "md5_2", "files": ["a/b"]},
        {"name": "md5_3", "files": ["x/y/z", "a"]},
    ]
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def make_zip():
    """Build an in-memory zip archive containing the given entry names"""
    def _make(names):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name in names:
                archive.writestr(name, b"" if name.endswith("/") else b"content")
        return buffer.getvalue()
    return _make


@pytest.fixture
def client(project_index):
    """TestClient with project_index installed as the serving state"""
    from fastapi.testclient import TestClient
    from zipsearch import main

    main.install_serving_state(ServingState(project_index, source="memory"))
    yield TestClient(main.app)
    main.install_serving_state(None)
