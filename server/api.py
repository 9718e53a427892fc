"""
Flask Blueprint for the keyword lookup and download proxy JSON API.

Serves: all-keywords, keywords, download.
"""

import time
from typing import Any

import requests
from flask import Blueprint, Response, current_app, request, stream_with_context

from server.keyword_table import get_keyword_table
from server.proxy import fetch_upstream, relay_body, relay_headers
from utils.Logger import Logger

api_bp = Blueprint("api", __name__, url_prefix="/api")

DEFAULT_PROXY_TIMEOUT_SEC = 30


@api_bp.route("/all-keywords", methods=["GET"])
def all_keywords() -> Any:
    """
    Return every known keyword.

    Returns:
        JSON {keywords: [...]}.
    """
    return {"keywords": get_keyword_table().keywords()}


@api_bp.route("/keywords", methods=["POST"])
def keywords() -> Any:
    """
    Return the URLs for a keyword.

    Expects JSON: {keyword}.

    Returns:
        JSON {urls: [...]}, 400 if keyword is missing, 404 if unknown.
    """
    data = request.get_json(silent=True) or {}
    keyword = data.get("keyword") if isinstance(data, dict) else None
    if not keyword or not isinstance(keyword, str):
        return {"error": "Keyword not specified"}, 400
    urls = get_keyword_table().urls_for(keyword)
    if urls is None:
        return {"error": "No URLs found for this keyword"}, 404
    return {"urls": urls}


@api_bp.route("/download", methods=["GET"])
def download() -> Any:
    """
    Fetch a known URL and stream its bytes back unmodified.

    Query: url (required, must belong to some keyword).

    Returns:
        The upstream body with Content-Type (and Content-Length when known);
        400 for an unknown URL, 500 on upstream failure, 504 on timeout.
    """
    url = (request.args.get("url") or "").strip()
    Logger.info(f"Download requested: {url}")
    if not url or not get_keyword_table().is_known_url(url):
        return {"error": "Invalid URL"}, 400

    timeout_sec = float(current_app.config.get("PROXY_TIMEOUT_SEC", DEFAULT_PROXY_TIMEOUT_SEC))
    deadline = time.monotonic() + timeout_sec
    try:
        upstream = fetch_upstream(url, timeout_sec)
    except requests.Timeout:
        Logger.error(f"Upstream fetch timed out: {url}")
        return {"error": "Request timed out"}, 504
    except requests.RequestException as e:
        Logger.error(f"Upstream fetch failed: {url}: {e}")
        return {"error": "Download error", "details": str(e)}, 500

    if not upstream.ok:
        status = upstream.status_code
        upstream.close()
        Logger.warning(f"Upstream returned {status}: {url}")
        return {"error": "Failed to fetch content", "details": f"Status: {status}"}, 500

    return Response(
        stream_with_context(relay_body(upstream, url, deadline)),
        status=200,
        headers=relay_headers(upstream),
        direct_passthrough=True,
    )
