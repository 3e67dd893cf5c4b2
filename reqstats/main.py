from __future__ import annotations

import uvicorn

from .settings import get_settings


def run() -> None:
    settings = get_settings()
    uvicorn.run("reqstats.api:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
