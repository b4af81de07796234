"""CLI entry point for the paygate API server."""

import argparse

from paygate.core.config import get_settings
from paygate.logging_config import configure_logging


def main(argv: list[str] | None = None) -> None:
    # Fails here, before serving, when required configuration is missing
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="paygate-server",
        description="Stripe checkout proxy and webhook receiver",
    )
    parser.add_argument("--host", default=settings.host, help="Bind host")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    import uvicorn

    uvicorn.run("paygate.main:app", host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
