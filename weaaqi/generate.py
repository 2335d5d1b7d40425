"""
Static data generator for the weaaqi dashboard.

Fetches the current reading, computes the presentation values and writes
them to data.json in the output directory, where a renderer or static site
picks them up. With --watch the generation repeats every refresh interval;
a failed cycle is logged and retried on the next one.

Usage:
    weaaqi-generate [--output-dir DIR] [--mode mock|live] [--watch]
"""

import argparse
import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import DATA_MODES, DashboardConfig, load_config
from .dashboard_system import DashboardSystem
from .errors import ConfigError, DataFetchError, InvalidReadingError, RuleTableError
from .log_setup import setup_logging
from .openweather_service import OpenWeatherService

logger = logging.getLogger(__name__)

DATA_FILE_NAME = "data.json"


def generate(
    system: DashboardSystem,
    service: OpenWeatherService,
    output_dir: Path,
    now: Optional[datetime] = None,
) -> Path:
    """
    Runs one generation cycle and writes data.json.

    Args:
        system: Orchestrator holding the rule tables and display options
        service: Source of readings
        output_dir: Directory to write into (created if missing)
        now: Generation time, defaults to the wall clock (UTC)

    Returns:
        Path of the written file
    """
    now = now or datetime.now(timezone.utc)
    values, log_entry = system.refresh(service, now=now, enable_persistent_logging=True)

    output_dir.mkdir(parents=True, exist_ok=True)
    data_path = output_dir / DATA_FILE_NAME
    document = {
        "generated_at": now.isoformat(),
        "reading": log_entry.reading.to_dict(),
        "presentation": values.to_dict(),
        "details": log_entry.details,
    }
    with open(data_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)

    logger.info("Data written to %s", data_path)
    return data_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate weather & AQI dashboard data.")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for data.json (default: WEAAQI_OUTPUT_DIR or dist)")
    parser.add_argument("--mode", choices=DATA_MODES, default=None, help="Data source mode (default: WEAAQI_DATA_MODE or mock)")
    parser.add_argument("--watch", action="store_true", help="Regenerate every refresh interval")
    parser.add_argument("--env-file", type=Path, default=None, help="Optional .env file to load")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: WEAAQI_LOG_LEVEL or INFO)")
    return parser


def run(config: DashboardConfig, output_dir: Path, mode: str, watch: bool) -> None:
    system = DashboardSystem(config)
    service = OpenWeatherService(
        mode=mode,
        api_key=config.api_key,
        latitude=config.latitude,
        longitude=config.longitude,
    )

    generate(system, service, output_dir)

    if not watch:
        return

    logger.info("Watching mode enabled. Regenerating every %s minutes", config.refresh_interval_seconds // 60)
    while True:
        time.sleep(config.refresh_interval_seconds)
        try:
            generate(system, service, output_dir)
        except (DataFetchError, InvalidReadingError, OSError) as e:
            logger.error("Generation failed, will retry on next interval: %s", e)


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.env_file)
    except ConfigError as e:
        setup_logging("INFO")
        logger.error("Configuration error: %s", e)
        return 1

    setup_logging(args.log_level or config.log_level)

    output_dir = args.output_dir or config.output_dir
    mode = args.mode or config.data_mode

    try:
        run(config, output_dir, mode, args.watch)
    except KeyboardInterrupt:
        logger.info("Stopped")
    except (DataFetchError, InvalidReadingError, RuleTableError, FileNotFoundError, OSError) as e:
        logger.error("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
