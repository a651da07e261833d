"""Confluent Cloud CKU sizing for self-managed Kafka clusters."""

__version__ = "1.0.0"

from .calculate_sizing import (  # noqa: E402
    ClusterSnapshot,
    DedicatedUsage,
    Recommendation,
    TierUsage,
    adjust,
    classify,
    dedicated_usage,
    generate_recommendation,
    resolve,
    tier_usage,
    usage_fraction,
)
from .errors import (  # noqa: E402
    CollectionError,
    ConfigurationError,
    InvalidMargin,
    InvalidMetricValue,
    SizingError,
    UnknownLimit,
)
from .limits import DEFAULT_LIMITS, Metric, Tier, TierLimitTable  # noqa: E402

__all__ = [
    "ClusterSnapshot",
    "CollectionError",
    "ConfigurationError",
    "DEFAULT_LIMITS",
    "DedicatedUsage",
    "InvalidMargin",
    "InvalidMetricValue",
    "Metric",
    "Recommendation",
    "SizingError",
    "Tier",
    "TierLimitTable",
    "TierUsage",
    "UnknownLimit",
    "adjust",
    "classify",
    "dedicated_usage",
    "generate_recommendation",
    "resolve",
    "tier_usage",
    "usage_fraction",
]
