"""Main entry point for the Sold Price Reconciler."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from reconciler.config.environment import EnvironmentConfig
from reconciler.config.exceptions import ConfigurationError
from reconciler.config.loader import load_config
from reconciler.config.models import AppConfig
from reconciler.logging import get_logger
from reconciler.logging.config import configure_logging
from reconciler.pipeline import InputDataError, ReconcilePipeline

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and prepare runtime configuration.

    Args:
        config_path: Path to configuration file (None searches the defaults)
        log_level_override: Log level from CLI (takes precedence)

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with the effective log level set

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    # Log level priority: CLI > Environment > Config
    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sold Price Reconciler - merge Booli and Hemnet sold listings into one list"
    )
    parser.add_argument(
        "--booli",
        type=Path,
        required=True,
        help="Booli export (JSON array of listings)",
    )
    parser.add_argument(
        "--hemnet",
        type=Path,
        required=True,
        help="Hemnet export (JSON array of listings)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the combined document to this file",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Sold Price Reconciler.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for configuration or input errors).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Sold Price Reconciler starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "log_format": app_config.logging.format,
            },
        )

        pipeline = ReconcilePipeline(app_config=app_config, env_config=env_config)
        result = pipeline.run_once(args.booli, args.hemnet, args.output)

        print(result.summary_line())
        if result.output_path is not None:
            print(f"Combined output written to {result.output_path}")

        logger.info(
            "Sold Price Reconciler finished",
            extra={
                "event": "service.stopping",
                "run_id": result.run_id,
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except InputDataError as e:
        print(f"Input Error: {e}", file=sys.stderr)
        logger.error(
            f"Input error: {e.message}",
            extra={"event": "input.error", "error_type": "InputDataError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
