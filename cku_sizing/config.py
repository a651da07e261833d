"""
CKU Sizing Tool - Configuration

Reads the msk.config properties file used across the migration tooling and
turns Kafka bootstrap servers into JMX endpoints.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG_FILE: str = "msk.config"
# Jolokia agent default; port 11001 on MSK is the Prometheus JMX exporter
DEFAULT_JMX_PORT: int = 8778
DEFAULT_SAFETY_MARGIN: float = 20
DEFAULT_FORMAT: str = "table"
DEFAULT_AWS_REGION: str = "us-east-1"
OUTPUT_FORMATS = ("table", "json", "csv")


@dataclass(frozen=True)
class MSKConfig:
    bootstrap_servers: Optional[str] = None
    cluster_arn: Optional[str] = None
    aws_region: str = DEFAULT_AWS_REGION
    verbose: bool = False
    jmx_port: Optional[int] = None


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse `key=value` lines. Blank lines and `#` comments are skipped;
    spaces and quotes are stripped from values.
    """
    properties: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        properties[key.strip()] = value.replace(" ", "").replace('"', "").replace("'", "")
    return properties


def load_msk_config(config_file: str) -> MSKConfig:
    """
    Load the MSK configuration file.

    Args:
        config_file (str): Path to the msk.config file

    Returns:
        MSKConfig: Parsed settings

    Raises:
        ConfigurationError: if the file is missing or a value is invalid
    """
    if not os.path.isfile(config_file):
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    logger.info("Reading configuration from: %s", config_file)
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            properties = parse_properties(f.read())
    except OSError as e:
        raise ConfigurationError(f"Could not read configuration file {config_file}: {e}") from e

    jmx_port: Optional[int] = None
    if properties.get("jmx.port"):
        try:
            jmx_port = int(properties["jmx.port"])
        except ValueError:
            raise ConfigurationError(f"Invalid jmx.port in {config_file}: {properties['jmx.port']!r}") from None

    config = MSKConfig(
        bootstrap_servers=properties.get("bootstrap.servers") or None,
        cluster_arn=properties.get("cluster.arn") or None,
        aws_region=properties.get("aws.region") or DEFAULT_AWS_REGION,
        verbose=properties.get("logging.verbose", "").lower() == "true",
        jmx_port=jmx_port,
    )
    if config.bootstrap_servers:
        logger.debug("Found bootstrap servers: %s", config.bootstrap_servers)
    if config.cluster_arn:
        logger.debug("Found cluster ARN: %s", config.cluster_arn)
    return config


def to_jmx_endpoints(bootstrap_servers: str, jmx_port: int = DEFAULT_JMX_PORT) -> List[str]:
    """Replace the Kafka port of each bootstrap server with the JMX port."""
    endpoints = []
    for broker in bootstrap_servers.split(","):
        host = broker.strip().split(":")[0]
        if host:
            endpoints.append(f"{host}:{jmx_port}")
    return endpoints
