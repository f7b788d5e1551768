"""Run the API with uvicorn.

Usage:
    python -m school_backend.serve
"""
import logging
import os

import uvicorn

from school_backend.main import create_app


def main() -> None:
    log_level = os.getenv("LOG_LEVEL", "info")
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    main()
