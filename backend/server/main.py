"""
Process entry point.

Loads .env, builds the app from the environment and serves it on PORT.
A failed listen bind aborts startup; everything else is retried or logged.
"""

from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

from config import AppConfig
from server.app import create_app


def main() -> None:
    load_dotenv()
    config = AppConfig.load_from_env()

    uvicorn.run(
        create_app(config),
        host="0.0.0.0",
        port=config.http_port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
