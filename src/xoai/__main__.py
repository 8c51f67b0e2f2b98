"""Entry point for running XO AI via ``python -m xoai``."""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    """Start the FastAPI-powered XO AI server."""

    host = os.environ.get("XOAI_HOST", "0.0.0.0")
    port = int(os.environ.get("XOAI_PORT", "8000"))
    log_level = os.environ.get("XOAI_LOG_LEVEL", "info").lower()
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("xoai.api:app", host=host, port=port, reload=False, log_level=log_level)


if __name__ == "__main__":
    main()
