#!/usr/bin/env python
"""
Run the SnapCook API with uvicorn.

Run manually:
    python scripts/run_server.py
"""
import logging

import uvicorn

from snapcook.app.core.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run("snapcook.app.main:app", host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
