"""
CKU Sizing Tool - Tier Limit Registry

Static limits for the Confluent Cloud cluster types. Elastic tiers (Basic,
Standard, Enterprise, Freight) are billed as a fraction of these limits;
Dedicated is bought in fixed CKUs and carries a maximum unit count.

The table is validated once when it is built. Lookups never substitute a
default: a missing entry raises UnknownLimit.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .errors import ConfigurationError, UnknownLimit


class Tier(Enum):
    BASIC = "basic"
    STANDARD = "standard"
    ENTERPRISE = "enterprise"
    FREIGHT = "freight"
    DEDICATED = "dedicated"
    NONE = "none"  # exceeds every elastic tier


class Metric(Enum):
    INGRESS = "ingress"
    EGRESS = "egress"
    CONNECTIONS = "connections"
    PARTITIONS = "partitions"
    REQUEST_RATE = "request_rate"  # measured, never used for tier decisions


# Elastic tiers in ascending order of capacity
ELASTIC_TIERS: Tuple[Tier, ...] = (Tier.BASIC, Tier.STANDARD, Tier.ENTERPRISE, Tier.FREIGHT)

# Metrics that take part in classification, in reporting order
CLASSIFIED_METRICS: Tuple[Metric, ...] = (Metric.INGRESS, Metric.EGRESS, Metric.CONNECTIONS, Metric.PARTITIONS)

# Priority used to resolve the overall recommendation (most restrictive wins)
RESOLUTION_PRIORITY: Dict[Tier, int] = {
    Tier.BASIC: 0,
    Tier.STANDARD: 1,
    Tier.ENTERPRISE: 2,
    Tier.FREIGHT: 3,
    Tier.NONE: 4,
}

METRIC_UNITS: Dict[Metric, str] = {
    Metric.INGRESS: "MBps",
    Metric.EGRESS: "MBps",
    Metric.CONNECTIONS: "count",
    Metric.PARTITIONS: "count",
    Metric.REQUEST_RATE: "count/sec",
}

# eCKU limits (based on Confluent Cloud specifications)
# Format: tier: {metric: limit}; throughput in MBps, partitions pre-replication
DEFAULT_ELASTIC_LIMITS: Dict[str, Dict[str, int]] = {
    "basic": {"ingress": 250, "egress": 750, "connections": 1000, "partitions": 4096},
    "standard": {"ingress": 250, "egress": 750, "connections": 10000, "partitions": 4096},
    # Enterprise: 10 eCKU current max, 32 eCKU in Limited Availability
    "enterprise": {"ingress": 600, "egress": 1800, "connections": 45000, "partitions": 30000},
    "freight": {"ingress": 9120, "egress": 27360, "connections": 2736000, "partitions": 50000},
}

# Dedicated CKU limits (fixed capacity, 152 CKU maximum)
DEFAULT_DEDICATED_LIMITS: Dict[str, int] = {
    "ingress": 9120,
    "egress": 27360,
    "connections": 2736000,
    "partitions": 100000,
}
DEFAULT_DEDICATED_MAX_UNITS: int = 152


def tier_priority(tier: Tier) -> int:
    """Return the resolution priority of an elastic tier or Tier.NONE."""
    try:
        return RESOLUTION_PRIORITY[tier]
    except KeyError:
        raise ValueError(f"Tier '{tier.value}' has no resolution priority") from None


def _positive_limit(value: Any, where: str) -> Decimal:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid limit for {where}: {value!r}")
    try:
        limit = Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"Invalid limit for {where}: {value!r}") from None
    if not limit.is_finite() or limit <= 0:
        raise ConfigurationError(f"Limit for {where} must be a positive number, got {value!r}")
    return limit


class TierLimitTable:
    """
    Immutable (tier, metric) -> limit mapping plus the Dedicated descriptor.

    Args:
        elastic_limits (mapping): {Tier: {Metric: limit}} for the four elastic tiers
        dedicated_limits (mapping): {Metric: limit} for the Dedicated tier
        max_units (number): Maximum number of Dedicated CKUs

    Raises:
        ConfigurationError: if a classified metric is missing for any tier,
            or a limit is not a positive number.
    """

    def __init__(self, elastic_limits: Mapping[Tier, Mapping[Metric, Any]],
                 dedicated_limits: Mapping[Metric, Any], max_units: Any):
        unexpected = [tier.value for tier in elastic_limits if tier not in ELASTIC_TIERS]
        if unexpected:
            raise ConfigurationError(f"Elastic limit table contains non-elastic tiers: {', '.join(unexpected)}")

        elastic: Dict[Tier, Mapping[Metric, Decimal]] = {}
        for tier in ELASTIC_TIERS:
            if tier not in elastic_limits:
                raise ConfigurationError(f"Limit table is missing tier '{tier.value}'")
            tier_limits = elastic_limits[tier]
            missing = [metric.value for metric in CLASSIFIED_METRICS if metric not in tier_limits]
            if missing:
                raise ConfigurationError(f"Tier '{tier.value}' is missing limits for: {', '.join(missing)}")
            elastic[tier] = MappingProxyType({
                metric: _positive_limit(limit, f"{tier.value}/{metric.value}")
                for metric, limit in tier_limits.items()
            })

        missing = [metric.value for metric in CLASSIFIED_METRICS if metric not in dedicated_limits]
        if missing:
            raise ConfigurationError(f"Tier 'dedicated' is missing limits for: {', '.join(missing)}")

        self._elastic = MappingProxyType(elastic)
        self._dedicated = MappingProxyType({
            metric: _positive_limit(limit, f"dedicated/{metric.value}")
            for metric, limit in dedicated_limits.items()
        })
        self._max_units = _positive_limit(max_units, "dedicated/max_units")

    @classmethod
    def from_dict(cls, elastic: Mapping[str, Mapping[str, Any]], dedicated: Mapping[str, Any],
                  max_units: Any) -> "TierLimitTable":
        """Build a table from plain string-keyed dictionaries (e.g. loaded from JSON)."""
        try:
            elastic_limits = {
                Tier(tier_name): {Metric(metric_name): limit for metric_name, limit in limits.items()}
                for tier_name, limits in elastic.items()
            }
            dedicated_limits = {Metric(metric_name): limit for metric_name, limit in dedicated.items()}
        except ValueError as e:
            raise ConfigurationError(f"Unknown tier or metric in limit table: {e}") from None
        return cls(elastic_limits, dedicated_limits, max_units)

    def limit(self, tier: Tier, metric: Metric) -> Decimal:
        try:
            return self._elastic[tier][metric]
        except KeyError:
            raise UnknownLimit(tier, metric) from None

    def dedicated_limit(self, metric: Metric) -> Decimal:
        try:
            return self._dedicated[metric]
        except KeyError:
            raise UnknownLimit(Tier.DEDICATED, metric) from None

    @property
    def max_units(self) -> Decimal:
        return self._max_units

    def as_dict(self) -> Dict[str, Any]:
        """Plain representation for reports."""
        table: Dict[str, Any] = {
            tier.value: {metric.value: float(limit) for metric, limit in limits.items()}
            for tier, limits in self._elastic.items()
        }
        table[Tier.DEDICATED.value] = {metric.value: float(limit) for metric, limit in self._dedicated.items()}
        table[Tier.DEDICATED.value]["max_units"] = float(self._max_units)
        return table


DEFAULT_LIMITS = TierLimitTable.from_dict(
    DEFAULT_ELASTIC_LIMITS, DEFAULT_DEDICATED_LIMITS, DEFAULT_DEDICATED_MAX_UNITS
)
