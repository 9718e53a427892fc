"""
Run the keyword/proxy server when the package is executed with -m.

  python -m server [--port ...] [--keywords-file ...] [--config ...]

Uses Args like the rest of the application; initializes Args and Logger when run standalone.
"""

import sys

# Args expects the command first; make "python -m server ..." look like "main.py serve ..."
if len(sys.argv) < 2 or sys.argv[1] != "serve":
    sys.argv = [sys.argv[0], "serve"] + sys.argv[1:]

from utils.Args import Args
from utils.Logger import Logger

if not getattr(Args, "_initialized", False):
    Args.initialize()
    Logger.initialize(log_level=Args.log_level, log_color=Args.log_color)

from server.app import run_server

if __name__ == "__main__":
    run_server(host=Args.host, port=int(Args.port))
