"""
Tests for web/app.py — routes driven through the Flask test client.

No request leaves the process: the relays' HTTP calls are patched.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from core import saved
from web.app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def make_response(status: int = 200, payload=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = text
    response.json.return_value = payload if payload is not None else {}
    return response


# ── /api/search ────────────────────────────────────────────────────────────────


class TestSearchEndpoint:
    def test_missing_query_is_400(self, client):
        resp = client.get("/api/search")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Query parameter is required"}

    def test_missing_key_is_500(self, client):
        resp = client.get("/api/search?q=seo")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Brave API key is not configured"}

    @patch("core.search.requests.get")
    def test_returns_results(self, mock_get, client, settings):
        mock_get.return_value = make_response(
            payload={"web": {"results": [{"title": "T", "url": "https://u", "description": "D"}]}}
        )

        resp = client.get("/api/search?q=seo")

        assert resp.status_code == 200
        assert resp.get_json() == {
            "results": [{"id": "0", "title": "T", "url": "https://u", "description": "D"}]
        }

    @patch("core.search.requests.get")
    def test_upstream_status_passed_through(self, mock_get, client, settings):
        mock_get.return_value = make_response(status=422, text="bad query")

        resp = client.get("/api/search?q=seo")

        assert resp.status_code == 422
        assert resp.get_json()["error"] == "Failed to fetch search results from Brave"
        assert resp.get_json()["details"] == "bad query"

    @patch("core.search.requests.get")
    def test_transport_error_is_500(self, mock_get, client, settings):
        mock_get.side_effect = requests.ConnectionError("down")

        resp = client.get("/api/search?q=seo")

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to fetch search results"}


# ── /api/generate-blog ─────────────────────────────────────────────────────────


class TestGenerateBlogEndpoint:
    def test_missing_topic_is_400(self, client):
        resp = client.post("/api/generate-blog", json={})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Topic is required"}

    @patch("core.writer.requests.post")
    def test_unparsable_body_is_500_with_details(self, mock_post, client, settings):
        resp = client.post("/api/generate-blog", data="not json", content_type="application/json")

        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"] == "Failed to generate blog post"
        assert body["details"]
        mock_post.assert_not_called()

    def test_non_object_body_is_400(self, client):
        resp = client.post("/api/generate-blog", json=["seo"])
        assert resp.status_code == 400

    @patch("core.writer.requests.post")
    def test_whitespace_topic_forwarded(self, mock_post, client, settings):
        mock_post.return_value = make_response(payload={"choices": [{"text": "# Post"}]})

        resp = client.post("/api/generate-blog", json={"topic": " "})

        assert resp.status_code == 200
        mock_post.assert_called_once()

    @patch("core.writer.requests.post")
    def test_missing_key_is_500_without_network(self, mock_post, client):
        resp = client.post("/api/generate-blog", json={"topic": "seo"})

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Together API key is not configured"}
        mock_post.assert_not_called()

    @patch("core.writer.requests.post")
    def test_returns_content(self, mock_post, client, settings):
        mock_post.return_value = make_response(payload={"choices": [{"text": "# SEO"}]})

        resp = client.post("/api/generate-blog", json={"topic": "seo"})

        assert resp.status_code == 200
        assert resp.get_json() == {"content": "# SEO"}

    @patch("core.writer.requests.post")
    def test_upstream_status_and_details(self, mock_post, client, settings):
        mock_post.return_value = make_response(status=503, text="unavailable")

        resp = client.post("/api/generate-blog", json={"topic": "seo"})

        assert resp.status_code == 503
        assert resp.get_json() == {"error": "Failed to generate blog post", "details": "unavailable"}

    @patch("core.writer.requests.post")
    def test_structural_mismatch_is_500(self, mock_post, client, settings):
        mock_post.return_value = make_response(payload={"output": "?"})

        resp = client.post("/api/generate-blog", json={"topic": "seo"})

        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"] == "Unexpected API response structure"
        assert body["details"] == '{"output": "?"}'

    @patch("core.writer.requests.post")
    def test_unexpected_exception_is_500_with_message(self, mock_post, client, settings):
        mock_post.side_effect = requests.Timeout("read timed out")

        resp = client.post("/api/generate-blog", json={"topic": "seo"})

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to generate blog post", "details": "read timed out"}


# ── Gaps and saved gaps ────────────────────────────────────────────────────────


class TestGapEndpoints:
    def test_gaps_for_query(self, client):
        body = client.get("/api/gaps?q=seo").get_json()
        assert body["query"] == "seo"
        assert body["gaps"][0] == {"gap": "templates about professional seo", "score": 9}
        assert len(body["gaps"]) == 5

    def test_gaps_for_empty_query(self, client):
        assert len(client.get("/api/gaps").get_json()["gaps"]) == 5

    def test_save_list_and_duplicate(self, client):
        gap = {"gap": "ultimate seo resources", "score": 7}

        first = client.post("/api/saved-gaps", json=gap)
        again = client.post("/api/saved-gaps", json=gap)

        assert first.status_code == 201
        assert again.status_code == 409
        assert client.get("/api/saved-gaps").get_json() == {"gaps": [gap]}

    def test_saved_list_cap_keeps_cookie_small(self, client):
        statuses = []
        cookie_sizes = []
        for i in range(80):
            resp = client.post("/api/saved-gaps", json={"gap": f"distinct gap number {i:02d}", "score": 7})
            statuses.append(resp.status_code)
            cookie_sizes.extend(len(h) for h in resp.headers.getlist("Set-Cookie"))

        assert statuses.count(201) == saved.MAX_SAVED
        assert statuses[saved.MAX_SAVED:] == [413] * (80 - saved.MAX_SAVED)
        assert max(cookie_sizes) < 4093
        assert len(client.get("/api/saved-gaps").get_json()["gaps"]) == saved.MAX_SAVED

    def test_full_list_error_message(self, client):
        for i in range(saved.MAX_SAVED):
            client.post("/api/saved-gaps", json={"gap": f"g{i}", "score": 5})

        resp = client.post("/api/saved-gaps", json={"gap": "extra", "score": 5})

        assert resp.status_code == 413
        assert "full" in resp.get_json()["error"]

    def test_invalid_score_rejected(self, client):
        resp = client.post("/api/saved-gaps", json={"gap": "x", "score": 42})
        assert resp.status_code == 400

    def test_delete_saved_gap(self, client):
        client.post("/api/saved-gaps", json={"gap": "a", "score": 5})

        resp = client.delete("/api/saved-gaps", json={"gap": "a"})
        missing = client.delete("/api/saved-gaps", json={"gap": "a"})

        assert resp.get_json() == {"gaps": []}
        assert missing.status_code == 404


# ── Download ───────────────────────────────────────────────────────────────────


class TestDownload:
    def test_markdown_attachment(self, client):
        resp = client.post("/api/blog/download", json={"topic": "Eco Travel", "content": "# Hi"})

        assert resp.status_code == 200
        assert resp.mimetype == "text/markdown"
        assert "eco-travel.md" in resp.headers["Content-Disposition"]
        assert resp.data == b"# Hi"

    def test_form_fields_accepted(self, client):
        resp = client.post("/api/blog/download", data={"topic": "seo", "content": "body"})
        assert resp.status_code == 200
        assert "seo.md" in resp.headers["Content-Disposition"]

    def test_missing_content_is_400(self, client):
        resp = client.post("/api/blog/download", json={"topic": "seo"})
        assert resp.status_code == 400


# ── Pages ──────────────────────────────────────────────────────────────────────


class TestPages:
    def test_index(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"Content Creator Tool" in resp.data

    def test_results_without_query_redirects_home(self, client):
        resp = client.get("/results")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/")

    @patch("core.search.requests.get")
    def test_results_page_shows_results_and_gaps(self, mock_get, client, settings):
        mock_get.return_value = make_response(
            payload={"web": {"results": [{"title": "Guide to SEO", "url": "https://g", "description": "d"}]}}
        )

        resp = client.get("/results?q=seo")

        assert resp.status_code == 200
        assert b"Guide to SEO" in resp.data
        assert b"templates about professional seo" in resp.data

    def test_results_page_renders_search_error(self, client):
        resp = client.get("/results?q=seo")
        assert resp.status_code == 200
        assert b"Error loading results" in resp.data
        assert b"ultimate seo resources" in resp.data

    def test_save_form_flashes_duplicate(self, client):
        form = {"q": "seo", "gap": "ultimate seo resources", "score": "7"}
        client.post("/results/save", data=form)

        resp = client.post("/results/save", data=form, follow_redirects=True)

        assert b"already in your saved list" in resp.data
        assert b"Saved Gaps" in resp.data

    @patch("core.writer.requests.post")
    def test_blog_page_renders_post(self, mock_post, client, settings):
        mock_post.return_value = make_response(payload={"choices": [{"text": "## Why it matters"}]})

        resp = client.post("/blog", data={"topic": "seo", "q": "seo"})

        assert resp.status_code == 200
        assert b"<h2>Why it matters</h2>" in resp.data
        assert b"Back to Results" in resp.data

    def test_blog_page_renders_error(self, client):
        resp = client.post("/blog", data={"topic": "seo"})
        assert b"Together API key is not configured" in resp.data

    def test_remove_form_removes_saved_gap(self, client):
        client.post("/results/save", data={"q": "seo", "gap": "ultimate seo resources", "score": "7"})

        resp = client.post(
            "/results/remove",
            data={"q": "seo", "gap": "ultimate seo resources"},
            follow_redirects=True,
        )

        assert b"Content gap removed from your list" in resp.data
        assert client.get("/api/saved-gaps").get_json() == {"gaps": []}

    def test_clear_form_forgets_everything(self, client):
        client.post("/api/saved-gaps", json={"gap": "a", "score": 5})
        client.post("/api/saved-gaps", json={"gap": "b", "score": 6})

        resp = client.post("/results/clear", data={"q": "seo"})

        assert resp.status_code == 302
        assert client.get("/api/saved-gaps").get_json() == {"gaps": []}

    def test_results_page_offers_remove_and_clear(self, client):
        client.post("/api/saved-gaps", json={"gap": "a", "score": 5})

        resp = client.get("/results?q=seo")

        assert b'action="/results/remove"' in resp.data
        assert b'action="/results/clear"' in resp.data

    def test_save_form_flashes_full_list(self, client):
        for i in range(saved.MAX_SAVED):
            client.post("/api/saved-gaps", json={"gap": f"g{i}", "score": 5})

        resp = client.post(
            "/results/save",
            data={"q": "seo", "gap": "one too many", "score": "7"},
            follow_redirects=True,
        )

        assert b"Your saved list is full" in resp.data

    @patch("core.writer.requests.post")
    def test_blog_page_offers_copy(self, mock_post, client, settings):
        mock_post.return_value = make_response(payload={"choices": [{"text": "# Post"}]})

        resp = client.post("/blog", data={"topic": "seo"})

        assert b'id="copy-post"' in resp.data
        assert b'id="post-markdown"' in resp.data
        assert b"copy.js" in resp.data

    @patch("core.writer.requests.post")
    def test_blog_page_neutralizes_script_links(self, mock_post, client, settings):
        mock_post.return_value = make_response(
            payload={"choices": [{"text": "[Read more](javascript:alert(document.cookie))"}]}
        )

        resp = client.post("/blog", data={"topic": "seo"})

        assert b'href="javascript:' not in resp.data
