"""
scripts/serve.py
=================
Run the Vitrine API with uvicorn, bound to HOST:PORT from the environment.

Run:
    python scripts/serve.py            # PORT=3000 by default
    PORT=8080 python scripts/serve.py
"""

from __future__ import annotations

import logging
import os
import sys

import uvicorn

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.api.main    import create_app   # noqa: E402
from src.core.config import Settings     # noqa: E402


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
        datefmt="%H:%M:%S",
    )
    settings = Settings.from_env()
    logging.getLogger(__name__).info("Server running on http://localhost:%d", settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
