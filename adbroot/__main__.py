"""Run the adbroot service.

Usage: ``python -m adbroot [--config PATH]``
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import load_config
from .errors import ConfigError
from .logging import setup_structured_logging
from .registry import default_registry
from .service import ADBRootService
from .transport import RootAccessServer

logger = logging.getLogger("adbroot")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="adbroot")
    parser.add_argument("--config", help="YAML configuration file")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"adbroot: {exc}", file=sys.stderr)
        return 2

    setup_structured_logging(config.level)
    service = ADBRootService.from_config(config)
    service.register(default_registry, config.service_name)

    server = RootAccessServer(
        config.socket_path, default_registry, config.service_name, config.uid_roles
    )
    logger.info("listening on %s", server.socket_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("exiting")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
