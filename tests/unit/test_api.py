"""
Unit tests for the HTTP endpoints (FastAPI TestClient, injected serving state).
"""

import pytest

from zipsearch import main


class TestRoot:
    """Test service metadata endpoints"""

    def test_root(self, client):
        """Greeting"""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Hello, welcome to our server!"

    def test_health(self, client):
        """Health reports index statistics"""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["documents"] == 4
        assert data["index_path"] == "memory"
        assert data["terms"] > 0


class TestSearch:
    """Test POST /search"""

    def test_search_ranks_matches(self, client):
        """Matches best first, with total and time"""
        response = client.post("/search", json={"terms": ["lombok", "AUTHORS", "README.md"]})

        assert response.status_code == 200
        data = response.json()
        assert data["matches"][0]["md5"] == "md5_lombok"
        assert data["total"] == len(data["matches"]) == 4
        assert data["time"] >= 0
        scores = [m["score"] for m in data["matches"]]
        assert scores == sorted(scores, reverse=True)

    def test_max_length(self, client):
        """Results limited after filtering"""
        response = client.post("/search", json={"terms": ["README.md"], "max_length": 2})

        data = response.json()
        assert data["total"] == 2
        assert len(data["matches"]) == 2

    def test_min_score(self, client):
        """Only scores strictly above the threshold"""
        full = client.post("/search", json={"terms": ["README.md", "AUTHORS"]}).json()
        threshold = full["matches"][1]["score"]

        data = client.post("/search", json={"terms": ["README.md", "AUTHORS"], "min_score": threshold}).json()

        assert all(m["score"] > threshold for m in data["matches"])
        assert data["total"] == 1

    def test_empty_terms(self, client):
        """Empty term list: empty result"""
        data = client.post("/search", json={"terms": []}).json()
        assert data == {"matches": [], "total": 0, "time": data["time"]}

    def test_unknown_term(self, client):
        """Absent term: empty result"""
        data = client.post("/search", json={"terms": ["nothing-like-this"]}).json()
        assert data["total"] == 0

    def test_invalid_body(self, client):
        """Schema violations are rejected"""
        assert client.post("/search", json={"terms": "lombok"}).status_code == 422
        assert client.post("/search", json={"terms": [], "max_length": -1}).status_code == 422

    def test_no_index_loaded(self, client):
        """Missing serving state is a request-level error, not a crash"""
        main.install_serving_state(None)

        response = client.post("/search", json={"terms": ["lombok"]})

        assert response.status_code == 503
        assert response.json()["detail"] == "No index loaded"


class TestSearchByFile:
    """Test POST /search_by_file"""

    def test_similar_archive_ranks_first(self, client, make_zip):
        """Archive listing is used as the query"""
        content = make_zip(["guava/", "guava/src/Cache.java", "guava/src/Main.java"])

        response = client.post(
            "/search_by_file",
            files={"file": ("upload.zip", content, "application/zip")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["matches"][0]["md5"] == "md5_guava"

    def test_form_limits(self, client, make_zip):
        """max_length and min_score form fields"""
        content = make_zip(["x/README.md", "x/AUTHORS"])

        response = client.post(
            "/search_by_file",
            files={"file": ("upload.zip", content, "application/zip")},
            data={"max_length": "1", "min_score": "0.0"},
        )

        data = response.json()
        assert data["total"] == 1

    def test_nan_min_score(self, client, make_zip):
        """NaN threshold is ignored"""
        content = make_zip(["x/README.md"])

        with_nan = client.post(
            "/search_by_file",
            files={"file": ("upload.zip", content, "application/zip")},
            data={"min_score": "nan"},
        ).json()
        without = client.post(
            "/search_by_file",
            files={"file": ("upload.zip", content, "application/zip")},
        ).json()

        assert with_nan["total"] == without["total"] > 0

    def test_not_a_zip(self, client):
        """Unreadable upload is a 400"""
        response = client.post(
            "/search_by_file",
            files={"file": ("upload.zip", b"plain text", "text/plain")},
        )

        assert response.status_code == 400
        assert "zip" in response.json()["detail"]


@pytest.mark.parametrize("path", ["/search", "/health"])
def test_endpoints_require_index(path):
    """Without an installed index, index-backed endpoints answer 503"""
    from fastapi.testclient import TestClient

    main.install_serving_state(None)
    client = TestClient(main.app)

    response = client.post(path, json={"terms": []}) if path == "/search" else client.get(path)

    assert response.status_code == 503
