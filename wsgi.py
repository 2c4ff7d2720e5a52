"""
WSGI entry point for the advisory API.

Run locally with ``python wsgi.py [--port N]``. Without ``--port`` the PORT
environment variable is used, then 5000.
"""

import os
import sys

from advisory_api import create_app

app = create_app()


def _listen_port(argv, default=5000) -> int:
    if "--port" in argv[:-1]:
        return int(argv[argv.index("--port") + 1])
    return int(os.environ.get("PORT", default))


if __name__ == "__main__":
    app.run(debug=app.config["DEBUG"], host="0.0.0.0", port=_listen_port(sys.argv[1:]))
