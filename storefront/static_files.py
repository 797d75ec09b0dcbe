from __future__ import annotations

import logging
import os

from flask import Response, send_file
from werkzeug.security import safe_join

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".svg": "image/svg+xml",
}
FALLBACK_CONTENT_TYPE = "text/plain"


def content_type_for(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    return CONTENT_TYPES.get(ext, FALLBACK_CONTENT_TYPE)


def not_found() -> Response:
    # Asset misses get a bare body, not the templated 404 page.
    return Response("Not found", status=404, mimetype="text/plain")


def serve_file(directory: str, subpath: str) -> Response:
    """Send ``directory/subpath`` or a plain 404. Paths escaping ``directory`` count as missing."""
    fs_path = safe_join(directory, subpath) if subpath else None
    if fs_path is None or not os.path.isfile(fs_path):
        logger.info("Static miss: %s", subpath)
        return not_found()
    return send_file(fs_path, mimetype=content_type_for(fs_path), max_age=0)
