"""Run the API server: ``python -m cosmic_watch``."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "cosmic_watch.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "4000")),
    )


if __name__ == "__main__":
    main()
