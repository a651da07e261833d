"""
CKU Sizing Tool - Broker Metrics Collection

Reads throughput, connection, partition and request-rate metrics from each
Kafka broker's JMX MBeans through a Jolokia HTTP agent and folds the
per-broker readings into a single ClusterSnapshot for the sizing calculator.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests
import urllib3

from .calculate_sizing import ClusterSnapshot
from .config import DEFAULT_JMX_PORT
from .errors import CollectionError
from .limits import Metric

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 10  # seconds per JMX read
BYTES_PER_MB: int = 1048576

# JMX metric definitions: metric -> (MBean, attribute)
JMX_METRICS: Dict[Metric, Tuple[str, str]] = {
    Metric.INGRESS: ("kafka.server:type=BrokerTopicMetrics,name=BytesInPerSec", "OneMinuteRate"),
    Metric.EGRESS: ("kafka.server:type=BrokerTopicMetrics,name=BytesOutPerSec", "OneMinuteRate"),
    Metric.CONNECTIONS: (
        "kafka.server:type=socket-server-metrics,listener=PLAINTEXT,networkProcessor=*,name=connection-count",
        "Value",
    ),
    Metric.PARTITIONS: ("kafka.controller:type=KafkaController,name=GlobalPartitionCount", "Value"),
    Metric.REQUEST_RATE: ("kafka.network:type=RequestMetrics,name=RequestsPerSec", "OneMinuteRate"),
}

# Sample workload used by --dry-run; no broker is queried
DRY_RUN_SNAPSHOT = ClusterSnapshot(ingress=45.50, egress=125.75, connections=6500, partitions=3200, request_rate=8500)


@dataclass(frozen=True)
class BrokerReading:
    """Metrics read from one broker. Partitions are non-zero only on the active controller."""
    host: str
    ingress_mbps: float
    egress_mbps: float
    connections: float
    request_rate: float
    partitions: Optional[float] = None


def _sum_values(value: Any) -> float:
    # Wildcard MBean reads return {mbean: {attribute: value}}
    if isinstance(value, dict):
        return sum(_sum_values(v) for v in value.values())
    if isinstance(value, bool) or value is None:
        raise CollectionError(f"Unexpected JMX value: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise CollectionError(f"Unexpected JMX value: {value!r}") from None


class JolokiaClient:
    """Client for reading broker JMX attributes through a Jolokia agent"""

    def __init__(self, host: str, port: int = DEFAULT_JMX_PORT, verify_ssl: bool = False,
                 timeout: float = DEFAULT_TIMEOUT, scheme: str = "http",
                 session: Optional[requests.Session] = None):
        """
        Initialize the Jolokia client

        Args:
            host (str): Broker host name or address
            port (int): Port of the Jolokia agent on the broker
            verify_ssl (bool): Whether to verify SSL certificates
            timeout (float): Timeout for each request in seconds
            scheme (str): "http" or "https"
            session (requests.Session): Optional session to reuse
        """
        self.host = host
        self.base_url = f"{scheme}://{host}:{port}/jolokia"
        self.verify_ssl = verify_ssl
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def check_connection(self) -> None:
        """Raise CollectionError if the agent does not answer."""
        try:
            response = self.session.get(f"{self.base_url}/version", verify=self.verify_ssl, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.SSLError as e:
            raise CollectionError(f"SSL verification failed for {self.base_url}: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise CollectionError(f"Failed to connect to JMX agent at {self.base_url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise CollectionError(f"Error connecting to JMX agent at {self.base_url}: {e}") from e

    def read(self, mbean: str, attribute: str) -> float:
        """
        Read one MBean attribute

        Args:
            mbean (str): MBean name, may contain wildcards
            attribute (str): Attribute name

        Returns:
            float: Attribute value, summed across matches for wildcard MBeans
        """
        logger.debug("Querying JMX metric: %s on %s", mbean, self.host)
        payload = {"type": "read", "mbean": mbean, "attribute": attribute}
        try:
            response = self.session.post(self.base_url, json=payload, verify=self.verify_ssl, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise CollectionError(f"Error reading {mbean} from {self.host}: {e}") from e
        except ValueError as e:
            raise CollectionError(f"Invalid JSON reading {mbean} from {self.host}") from e

        if data.get("status") != 200:
            error = data.get("error", "Unknown error")
            raise CollectionError(f"JMX read of {mbean} on {self.host} failed: {error}")
        return _sum_values(data.get("value"))

    def read_metric(self, metric: Metric) -> float:
        mbean, attribute = JMX_METRICS[metric]
        return self.read(mbean, attribute)


def split_endpoint(endpoint: str, default_port: int = DEFAULT_JMX_PORT) -> Tuple[str, int]:
    """Split `host[:port]` into host and port."""
    host, _, port = endpoint.strip().partition(":")
    if not port:
        return host, default_port
    try:
        return host, int(port)
    except ValueError:
        raise CollectionError(f"Invalid port in broker endpoint: {endpoint!r}") from None


def read_broker(client: JolokiaClient, include_partitions: bool = True) -> BrokerReading:
    """Read one broker's metrics. Throughput is converted from bytes/sec to MBps."""
    client.check_connection()
    reading = BrokerReading(
        host=client.host,
        ingress_mbps=client.read_metric(Metric.INGRESS) / BYTES_PER_MB,
        egress_mbps=client.read_metric(Metric.EGRESS) / BYTES_PER_MB,
        connections=client.read_metric(Metric.CONNECTIONS),
        request_rate=client.read_metric(Metric.REQUEST_RATE),
        partitions=client.read_metric(Metric.PARTITIONS) if include_partitions else None,
    )
    logger.debug("Broker %s metrics: ingress=%.2fMB/s, egress=%.2fMB/s, connections=%.0f",
                 reading.host, reading.ingress_mbps, reading.egress_mbps, reading.connections)
    return reading


def simulated_reading(host: str, rng: random.Random, include_partitions: bool = False) -> BrokerReading:
    """Demonstration values for a broker, in the ranges of a small production cluster."""
    return BrokerReading(
        host=host,
        ingress_mbps=float(rng.randint(10, 59)),
        egress_mbps=float(rng.randint(20, 119)),
        connections=float(rng.randint(1000, 5999)),
        request_rate=float(rng.randint(1000, 10999)),
        partitions=float(rng.randint(500, 2499)) if include_partitions else None,
    )


def aggregate_readings(readings: Sequence[BrokerReading]) -> ClusterSnapshot:
    """
    Fold per-broker readings into one cluster snapshot.

    Throughput, connections and request rate are summed over brokers.
    Partitions are a cluster-wide metric reported by the active controller;
    other brokers report 0, so the maximum over all readings is used.
    """
    if not readings:
        raise CollectionError("No broker readings to aggregate")
    partitions = max((r.partitions for r in readings if r.partitions is not None), default=0)
    return ClusterSnapshot(
        ingress=round(sum(r.ingress_mbps for r in readings), 2),
        egress=round(sum(r.egress_mbps for r in readings), 2),
        connections=round(sum(r.connections for r in readings)),
        partitions=round(partitions),
        request_rate=round(sum(r.request_rate for r in readings)),
    )


def collect_cluster_snapshot(brokers: Sequence[str], jmx_port: int = DEFAULT_JMX_PORT, verify_ssl: bool = False,
                             timeout: float = DEFAULT_TIMEOUT, simulate: bool = False,
                             rng: Optional[random.Random] = None,
                             client_factory: Callable[..., JolokiaClient] = JolokiaClient) -> ClusterSnapshot:
    """
    Collect metrics from all brokers

    Args:
        brokers (list): Broker endpoints, `host` or `host:jmx_port`
        jmx_port (int): JMX port used when an endpoint carries none
        verify_ssl (bool): Whether to verify SSL certificates
        timeout (float): Timeout for each JMX read
        simulate (bool): Generate demonstration values instead of querying brokers
        rng (random.Random): Random source for simulated values
        client_factory (callable): Builds a JolokiaClient for (host, port, ...)

    Returns:
        ClusterSnapshot: Aggregated cluster metrics

    Raises:
        CollectionError: if no broker could be read
    """
    if not brokers:
        raise CollectionError("No brokers given to collect metrics from")
    if not verify_ssl:
        # Disable SSL warnings for self-signed certificates
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    logger.info("Collecting metrics from %d brokers...", len(brokers))
    rng = rng or random.Random()
    readings: List[BrokerReading] = []
    for endpoint in brokers:
        host, port = split_endpoint(endpoint, jmx_port)
        logger.debug("Processing broker: %s", host)
        if simulate:
            # The first simulated broker stands in for the controller
            readings.append(simulated_reading(host, rng, include_partitions=not readings))
            continue
        try:
            client = client_factory(host, port, verify_ssl=verify_ssl, timeout=timeout)
            readings.append(read_broker(client))
        except CollectionError as e:
            logger.warning("Skipping broker %s: %s", host, e)

    if not readings:
        raise CollectionError("No broker returned metrics; check the JMX port and that a Jolokia agent is running")

    snapshot = aggregate_readings(readings)
    logger.info("Cluster totals: %.2fMB/s ingress, %.2fMB/s egress, %d connections, %d partitions",
                snapshot.ingress, snapshot.egress, snapshot.connections, snapshot.partitions)
    return snapshot
