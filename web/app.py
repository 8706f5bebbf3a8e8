"""
Flask web server for Gap Writer.

Routes
──────
GET    /                       Search form
GET    /results?q=...          Results, content gaps, saved gaps, blog form
POST   /results/save           Save a gap from the results page (form)
POST   /results/remove         Remove a saved gap (form)
POST   /results/clear          Forget all saved gaps (form)
POST   /blog                   Generate a post from the blog form
GET    /api/search?q=...       Brave search relay (JSON)
POST   /api/generate-blog      Completion relay (JSON)
GET    /api/gaps?q=...         Content gaps for a keyword (JSON)
GET    /api/saved-gaps         Saved gaps in this session (JSON)
POST   /api/saved-gaps         Save a gap (JSON)
DELETE /api/saved-gaps         Remove a saved gap (JSON)
POST   /api/blog/download      Download a post as a Markdown file
"""

from __future__ import annotations

import io
import logging
import os
import sys

from dotenv import load_dotenv
from flask import (
    Flask,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    session,
    url_for,
)
from pydantic import ValidationError
from werkzeug.exceptions import BadRequest

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from core import saved
from core.errors import RelayError
from core.export import markdown_filename, render_html
from core.gaps import generate_gaps
from core.models import ContentGap
from core.search import search
from core.writer import generate_blog_post

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = Settings().secret_key

DUPLICATE_MESSAGE = "This content gap is already in your saved list"
FULL_MESSAGE = "Your saved list is full. Remove a gap to save another."


def _error(message: str, status: int, details: str | None = None):
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


# ── Pages ──────────────────────────────────────────────────────────────────

@app.route("/")
def index():
    return render_template("index.html")


@app.route("/results")
def results_page():
    """Search results and gap suggestions for ``q``; blank ``q`` goes home."""
    query = request.args.get("q", "")
    if not query.strip():
        return redirect(url_for("index"))

    results = []
    search_error = None
    try:
        results = search(query, Settings())
    except RelayError as exc:
        search_error = exc.message
    except Exception:
        logger.exception("Search page error for query=%r", query)
        search_error = "There was a problem fetching search results. Please try again."

    return render_template(
        "results.html",
        query=query,
        results=results,
        search_error=search_error,
        gaps=generate_gaps(query),
        saved_gaps=saved.get_saved(session),
        topic=request.args.get("topic", ""),
    )


@app.route("/results/save", methods=["POST"])
def save_gap_form():
    query = request.form.get("q", "")
    try:
        gap = ContentGap(gap=request.form.get("gap", ""), score=request.form.get("score", 0))
    except ValidationError:
        flash("That content gap could not be saved.", "error")
        return redirect(url_for("results_page", q=query))

    result = saved.save_gap(session, gap)
    if result is saved.SaveResult.SAVED:
        flash("Content gap has been saved to your list", "success")
    elif result is saved.SaveResult.DUPLICATE:
        flash(DUPLICATE_MESSAGE, "error")
    else:
        flash(FULL_MESSAGE, "error")
    return redirect(url_for("results_page", q=query))


@app.route("/results/remove", methods=["POST"])
def remove_gap_form():
    query = request.form.get("q", "")
    if saved.remove_gap(session, request.form.get("gap", "")):
        flash("Content gap removed from your list", "success")
    return redirect(url_for("results_page", q=query))


@app.route("/results/clear", methods=["POST"])
def clear_gaps_form():
    saved.clear(session)
    flash("Saved gaps cleared", "success")
    return redirect(url_for("results_page", q=request.form.get("q", "")))


@app.route("/blog", methods=["POST"])
def blog_page():
    """Generate a post from the form and render it, or render the error."""
    topic = request.form.get("topic", "")
    query = request.form.get("q", "")

    post = None
    post_html = None
    generation_error = None
    try:
        post = generate_blog_post(topic, Settings())
        post_html = render_html(post.content)
    except RelayError as exc:
        generation_error = exc.message
    except Exception as exc:
        logger.exception("Blog page error for topic=%r", topic)
        generation_error = str(exc) or "Failed to generate blog post"

    return render_template(
        "blog.html",
        topic=topic,
        query=query,
        post=post,
        post_html=post_html,
        generation_error=generation_error,
    )


# ── Relays ─────────────────────────────────────────────────────────────────

@app.route("/api/search")
def search_endpoint():
    """Relay ``q`` to Brave and return ``{"results": [...]}``."""
    query = request.args.get("q", "")
    if not query:
        return _error("Query parameter is required", 400)

    try:
        results = search(query, Settings())
    except RelayError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        logger.exception("Error fetching search results for query=%r", query)
        return _error("Failed to fetch search results", 500)

    return jsonify({"results": [r.model_dump() for r in results]})


@app.route("/api/generate-blog", methods=["POST"])
def generate_blog_endpoint():
    """Relay ``{"topic": ...}`` to the completion API, return ``{"content": ...}``."""
    try:
        data = request.get_json(force=True)
    except BadRequest as exc:
        logger.error("Unreadable generate-blog body: %s", exc.description)
        return _error("Failed to generate blog post", 500, details=exc.description)

    topic = data.get("topic") if isinstance(data, dict) else None
    if not isinstance(topic, str) or not topic:
        return _error("Topic is required", 400)

    try:
        post = generate_blog_post(topic, Settings())
    except RelayError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception as exc:
        logger.exception("Error generating blog post for topic=%r", topic)
        return _error("Failed to generate blog post", 500, details=str(exc))

    return jsonify({"content": post.content})


# ── Gaps ───────────────────────────────────────────────────────────────────

@app.route("/api/gaps")
def gaps_endpoint():
    query = request.args.get("q", "")
    return jsonify({"query": query, "gaps": [g.model_dump() for g in generate_gaps(query)]})


@app.route("/api/saved-gaps")
def list_saved_gaps():
    return jsonify({"gaps": [g.model_dump() for g in saved.get_saved(session)]})


@app.route("/api/saved-gaps", methods=["POST"])
def add_saved_gap():
    """Save ``{"gap", "score"}``; 409 on a duplicate, 413 once the list is full."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("Gap is required", 400)
    try:
        gap = ContentGap.model_validate(data)
    except ValidationError as exc:
        return _error("Invalid content gap", 400, details=str(exc))

    result = saved.save_gap(session, gap)
    if result is saved.SaveResult.DUPLICATE:
        return _error(DUPLICATE_MESSAGE, 409)
    if result is saved.SaveResult.FULL:
        return _error(FULL_MESSAGE, 413)
    return jsonify({"gaps": [g.model_dump() for g in saved.get_saved(session)]}), 201


@app.route("/api/saved-gaps", methods=["DELETE"])
def remove_saved_gap():
    data = request.get_json(silent=True)
    text = data.get("gap") if isinstance(data, dict) else None
    if not text:
        return _error("Gap is required", 400)
    if not saved.remove_gap(session, text):
        return _error("Not found", 404)
    return jsonify({"gaps": [g.model_dump() for g in saved.get_saved(session)]})


# ── Download ───────────────────────────────────────────────────────────────

@app.route("/api/blog/download", methods=["POST"])
def download_blog():
    """Return ``content`` as a Markdown attachment named after ``topic``.

    Accepts a JSON body or the blog page's form fields.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    topic = str(data.get("topic") or "")
    content = str(data.get("content") or "")
    if not topic.strip() or not content:
        return _error("Topic and content are required", 400)

    return send_file(
        io.BytesIO(content.encode("utf-8")),
        mimetype="text/markdown",
        as_attachment=True,
        download_name=markdown_filename(topic),
    )


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    app.run(debug=settings.debug, host="0.0.0.0", port=settings.port)
