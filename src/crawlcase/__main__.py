"""``crawlcase`` console script / ``python -m crawlcase``."""

from __future__ import annotations

import logging
import sys

from pydantic import ValidationError

from crawlcase.app import create_app
from crawlcase.foundation.config import get_settings
from crawlcase.foundation.errors import ConfigurationError
from crawlcase.runtime.observability import configure_from_settings

logger = logging.getLogger("crawlcase")


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 2
    configure_from_settings(settings.logging)

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 2

    server = settings.server
    if server.transport == "stdio":
        logger.info("Running in stdio mode, logging will be directed to stderr")
    app.server.run(server.transport, host=server.host, port=server.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
