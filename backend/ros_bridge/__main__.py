"""
Entry point: ros-bridge / python -m ros_bridge

Exit codes:
- 0: server stopped gracefully
- 1: configuration could not be loaded or validated
- 2: server failed while starting or running
"""
import argparse
import sys
from typing import List, Optional

import uvicorn

from ros_bridge.core.config import load_config, settings
from ros_bridge.core.errors import ConfigError
from ros_bridge.core.logging import LOG_FORMATS, logger, setup_logging
from ros_bridge.main import create_app

EXIT_CONFIG_ERROR = 1
EXIT_SERVER_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="REST bridge for the RouterOS API")
    parser.add_argument("--config", default=settings.CONFIG_FILE, help="Path to the YAML config file")
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["debug", "info", "warning", "error"],
        type=str.lower,
        help="Log level",
    )
    parser.add_argument("--log-format", default=settings.LOG_FORMAT, choices=LOG_FORMATS, help="Log format")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    logger.debug(f"loading config file={args.config}")
    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"error loading config: {e}")
        return EXIT_CONFIG_ERROR

    app = create_app(config)
    server = config.server
    tls = server.http_tls_config
    tls_options = {}
    if tls is not None:
        tls_options = {
            "ssl_certfile": tls.cert_file,
            "ssl_keyfile": tls.key_file,
            "ssl_ca_certs": tls.client_ca_file,
            "ssl_cert_reqs": tls.cert_reqs,
        }

    try:
        uvicorn.run(
            app,
            host=server.listen_host,
            port=server.listen_port,
            log_config=None,
            access_log=False,
            timeout_keep_alive=30,
            **tls_options,
        )
    except SystemExit as e:
        # uvicorn exits with a non-zero code when startup fails (e.g. address in use)
        if e.code not in (None, 0):
            logger.error(f"error while running server: exit code {e.code}")
            return EXIT_SERVER_ERROR
    except (OSError, RuntimeError) as e:
        logger.error(f"error while running server: {e}")
        return EXIT_SERVER_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
