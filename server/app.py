"""
Flask app for the keyword lookup service and download proxy.

The keyword table is read from Args.keywords_file when the server starts. The
proxy timeout comes from Args.proxy_timeout_sec (default 30 seconds).
"""

import logging
from typing import Any

from flask import Flask

from server.api import api_bp
from server.keyword_table import get_keyword_table
from utils.Args import Args

app = Flask(__name__)
app.config["PROXY_TIMEOUT_SEC"] = Args.get("proxy_timeout_sec", 30)
app.register_blueprint(api_bp)


@app.after_request
def add_cors_headers(response: Any) -> Any:
    """Allow the API to be called from any origin."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    return response


class _QuietRequestLogFilter(logging.Filter):
    """Suppress Werkzeug request logs for the keyword list, which clients poll on start."""

    _QUIET_PATHS = ("/api/all-keywords",)

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(path in msg for path in self._QUIET_PATHS)


logging.getLogger("werkzeug").addFilter(_QuietRequestLogFilter())


def run_server(host: str = "127.0.0.1", port: int = 3000) -> None:
    """
    Serve the API until interrupted.

    The keyword table is loaded before listening, so a bad keyword file stops
    the server at startup.
    """
    app.config["PROXY_TIMEOUT_SEC"] = Args.get("proxy_timeout_sec", 30)
    get_keyword_table()
    app.run(host=host, port=port, debug=False, threaded=True)
