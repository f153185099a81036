"""Serve the rundown API with uvicorn: ``python -m rundown``."""

from __future__ import annotations

import os

import uvicorn

from rundown.main import create_app


def main() -> None:
    # log_config=None keeps the dictConfig applied by create_app()
    uvicorn.run(
        create_app(),
        host=os.environ.get("RUNDOWN_HOST", "127.0.0.1"),
        port=int(os.environ.get("RUNDOWN_PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
