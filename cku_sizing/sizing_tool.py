#!/usr/bin/env python3
# =============================================================================
# Confluent Cloud CKU Sizing Tool
# =============================================================================
#
# Collects Kafka broker metrics over JMX and recommends the Confluent Cloud
# cluster type (Basic, Standard, Enterprise, Freight) a workload needs, with
# estimated eCKU usage and a Dedicated CKU comparison.
#
# Usage:
#   cku-sizing -f msk.config -s 25 -o json
#   cku-sizing -b 10.0.1.10,10.0.1.11,10.0.1.12 -p 8778 -s 30
#   cku-sizing --dry-run -o table
#
# =============================================================================

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .calculate_sizing import generate_recommendation
from .collect_metrics import DEFAULT_TIMEOUT, DRY_RUN_SNAPSHOT, collect_cluster_snapshot
from .config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_FORMAT,
    DEFAULT_JMX_PORT,
    DEFAULT_SAFETY_MARGIN,
    OUTPUT_FORMATS,
    MSKConfig,
    load_msk_config,
    to_jmx_endpoints,
)
from .errors import SizingError
from .report import format_report

logger = logging.getLogger("cku_sizing")

LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def validate_port(value: str) -> int:
    try:
        port = int(value)
        if not 0 < port < 65536:
            raise ValueError("Port out of range.")
        return port
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid port '{value}'. Please enter a number between 1 and 65535.")


def validate_margin(value: str) -> float:
    try:
        margin = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid safety margin '{value}'. Please enter a percentage.")
    if margin < 0 or margin != margin:
        raise argparse.ArgumentTypeError(f"Invalid safety margin '{value}'. It must be a non-negative percentage.")
    return margin


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cku-sizing",
        description="Confluent Cloud eCKU Estimator - recommends a cluster type from Kafka broker JMX metrics",
    )
    parser.add_argument("-c", "--cluster", help="MSK cluster name or ARN")
    parser.add_argument("-b", "--brokers", help="Comma-separated list of broker endpoints (host or host:jmx_port)")
    parser.add_argument("-f", "--config-file", help=f"Path to msk.config file (default: ./{DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("-p", "--jmx-port", type=validate_port,
                        help=f"Port of the Jolokia JMX agent on each broker (default: {DEFAULT_JMX_PORT})")
    parser.add_argument("-s", "--safety-margin", type=validate_margin, default=DEFAULT_SAFETY_MARGIN,
                        help=f"Safety margin percentage (default: {DEFAULT_SAFETY_MARGIN})")
    parser.add_argument("-o", "--format", choices=OUTPUT_FORMATS, default=DEFAULT_FORMAT,
                        help=f"Output format (default: {DEFAULT_FORMAT})")
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("-d", "--dry-run", action="store_true",
                        help="Use sample metrics instead of querying brokers")
    parser.add_argument("--simulate", action="store_true",
                        help="Generate demonstration metrics for each broker instead of reading JMX")
    parser.add_argument("--verify-ssl", action="store_true", help="Verify SSL certs (default: False)")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help=f"Timeout in seconds for each JMX read (default: {DEFAULT_TIMEOUT})")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_config(args: argparse.Namespace) -> MSKConfig:
    """Load the config file named on the command line, or ./msk.config when present."""
    if args.config_file:
        logger.info("Using configuration file: %s", args.config_file)
        return load_msk_config(args.config_file)
    if os.path.isfile(DEFAULT_CONFIG_FILE):
        logger.info("Found %s file, reading configuration...", DEFAULT_CONFIG_FILE)
        return load_msk_config(DEFAULT_CONFIG_FILE)
    return MSKConfig()


def write_output(output_file: str, content: str) -> None:
    # Create backup of existing output file if it exists
    if os.path.exists(output_file):
        backup_file = f"{output_file}.bak"
        try:
            logger.info("Creating backup of existing output file: %s", backup_file)
            os.replace(output_file, backup_file)
        except OSError as e:
            logger.warning("Could not create backup of %s: %s", output_file, e)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
        if not content.endswith("\n"):
            f.write("\n")
    logger.info("Recommendations saved to %s", output_file)


def run(args: argparse.Namespace) -> int:
    config = resolve_config(args)
    if config.verbose:
        logger.setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled from config file")

    jmx_port = args.jmx_port or config.jmx_port or DEFAULT_JMX_PORT
    brokers: List[str] = []
    if args.brokers:
        brokers = [broker.strip() for broker in args.brokers.split(",") if broker.strip()]
    elif config.bootstrap_servers:
        brokers = to_jmx_endpoints(config.bootstrap_servers, jmx_port)
        logger.debug("Converted to JMX endpoints: %s", ",".join(brokers))
    cluster = args.cluster or config.cluster_arn

    logger.info("Starting Confluent Cloud eCKU cluster type recommendation...")
    if args.dry_run:
        logger.info("DRY RUN MODE - No actual JMX queries will be performed")
        snapshot = DRY_RUN_SNAPSHOT
    else:
        if not brokers and not cluster:
            logger.error("Either --brokers, --cluster, or a valid config file must be specified")
            return 1
        if not brokers:
            logger.warning("Cluster endpoint resolution is not supported for %s (region %s). "
                           "Please provide --brokers directly.", cluster, config.aws_region)
            return 1
        logger.info("Target: %s", cluster or ",".join(brokers))
        snapshot = collect_cluster_snapshot(brokers, jmx_port=jmx_port, verify_ssl=args.verify_ssl,
                                            timeout=args.timeout, simulate=args.simulate)

    recommendation = generate_recommendation(snapshot, args.safety_margin)
    color = args.output is None and args.format == "table" and sys.stdout.isatty()
    content = format_report(recommendation, args.format, color=color)

    if args.output:
        write_output(args.output, content)
    else:
        print(content)

    logger.info("eCKU cluster type recommendation completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main function for the command line"""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        return run(args)
    except SizingError as e:
        logger.error("%s", e)
        return 1
    except OSError as e:
        logger.error("Error writing output: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
