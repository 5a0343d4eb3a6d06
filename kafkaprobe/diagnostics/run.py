"""Command-line entry point for the Kafka connection probe."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from kafkaprobe.cluster.backend import FakeClusterBackend
from kafkaprobe.config.broker_config import BrokerConfig, ConfigError
from kafkaprobe.config.loader import DEFAULT_ENV_FILE, load_settings
from kafkaprobe.core.logging import (
    configure_logging,
    enable_file_logging,
    log_error,
    logger,
)
from kafkaprobe.diagnostics.report import (
    FAILED_BANNER,
    RULE,
    describe_config,
    describe_environment,
    format_report,
    report_to_json,
)
from kafkaprobe.diagnostics.runner import run_probes


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(
        prog="kafka-probe",
        description="Verify that a client can connect to a Kafka cluster.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML file with KAFKA_DEFAULT_* settings.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_FILE,
        help="Dotenv file to read settings from (default: .env).",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Run the probe sequence against an in-memory fake cluster.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the final report as JSON.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level for progress output.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the probe and return a process exit code."""

    args = parse_args(argv)
    configure_logging(args.log_level)
    if args.log_file is not None:
        enable_file_logging(args.log_file)

    try:
        settings = load_settings(config_file=args.config, env_file=args.env_file)
        if not args.json:
            print(describe_environment(settings))
        config = BrokerConfig.from_settings(settings)
    except ConfigError as exc:
        log_error(f"❌ Invalid configuration: {exc}")
        if not args.json:
            print(RULE)
            print(FAILED_BANNER)
        return 1

    if not args.json:
        print(describe_config(config))

    backend = FakeClusterBackend() if args.offline else None
    try:
        report = asyncio.run(run_probes(config, backend))
    except Exception as exc:  # noqa: BLE001 - any escape is a failed run
        logger.exception("Unexpected error during probe run")
        log_error(f"💥 Unexpected error: {exc}")
        return 1

    if args.json:
        print(report_to_json(report, config))
    else:
        print(format_report(report, config, settings))
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
