"""CLI entry point for the hookrelay server."""

import argparse
import math

from hookrelay.config import load_settings
from hookrelay.logging_config import configure_logging


def main(argv: list[str] | None = None) -> None:
    settings = load_settings()

    parser = argparse.ArgumentParser(
        prog="hookrelay-server",
        description="hookrelay: verify bank webhooks and republish them on Redis pub/sub",
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind host (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    args = parser.parse_args(argv)

    settings = settings.model_copy(update={"host": args.host, "port": args.port})
    configure_logging(log_level=settings.log_level, json_output=settings.json_logs)

    import uvicorn

    from hookrelay.main import create_app

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
        timeout_graceful_shutdown=math.ceil(settings.shutdown_timeout),
    )


if __name__ == "__main__":
    main()
