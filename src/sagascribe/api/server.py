"""
ASGI Entry Point for the Saga Scribe timeline service.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads environment variables from `.env` before the application factory runs
so the settings singleton sees them.

Usage
-----
Run via the module entry point:
    $ python -m sagascribe.api.server

Or via uvicorn directly:
    $ uvicorn sagascribe.api.server:app --reload

Or through the CLI:
    $ sagascribe serve --seed samples/ember_crown.json
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env BEFORE importing modules that read settings at import time.
load_dotenv(dotenv_path=Path(".env"))

from sagascribe.api.app import create_app  # noqa: E402
from sagascribe.core.settings import get_logger, load_settings  # noqa: E402

logger = get_logger(__name__)

# Factory invocation
app = create_app()


def main(host: str | None = None, port: int | None = None, seed_file: Path | None = None) -> None:
    """Run the service with uvicorn using settings for anything not given.

    A `seed_file` builds a fresh app for it; otherwise the module-level `app`
    (seeded from `SAGASCRIBE_SEED_FILE`) is served.
    """
    s = load_settings()
    host = host or s.host
    port = port or s.port
    target = create_app(seed_file=seed_file) if seed_file is not None else app
    logger.info(
        "Serving timeline API on http://%s:%d (seed: %s)", host, port, seed_file or s.seed_file
    )
    uvicorn.run(target, host=host, port=port, log_level=s.log_level.lower())


if __name__ == "__main__":
    main()
