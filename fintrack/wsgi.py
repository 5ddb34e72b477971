"""WSGI entrypoint for fintrack."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PARENT = ROOT.parent
if str(PARENT) not in sys.path:
    sys.path.insert(0, str(PARENT))
# The package ships a `platform` subpackage; keep the package directory out of
# sys.path so the stdlib `platform` module still resolves.
if str(ROOT) in sys.path:
    sys.path.remove(str(ROOT))

from fintrack import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    import os

    host = os.environ.get("FLASK_RUN_HOST", "127.0.0.1")
    port = int(os.environ.get("FLASK_RUN_PORT", "5000"))
    app.run(host=host, port=port)  # nosec B104
