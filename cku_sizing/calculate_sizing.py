"""
CKU Sizing Tool - Sizing Calculator

Classifies a point-in-time snapshot of Kafka cluster metrics into the cheapest
Confluent Cloud cluster type that can host it, and reports how much of each
cluster type's allowance the workload would consume.

Every observed value is inflated by the safety margin exactly once; the same
adjusted value is then compared against, and divided by, the limits of every
tier. Arithmetic is done with Decimal so that a value equal to a limit is
compatible with that tier and usage figures truncate exactly.
"""

import logging
from dataclasses import dataclass, field, fields
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InvalidMargin, InvalidMetricValue
from .limits import (
    CLASSIFIED_METRICS,
    DEFAULT_LIMITS,
    ELASTIC_TIERS,
    Metric,
    Tier,
    TierLimitTable,
    tier_priority,
)

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
HUNDRED = Decimal(100)
USAGE_DIGITS = Decimal("0.001")  # usage figures keep three decimals, truncated


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """
    Convert a non-negative finite number to Decimal.

    Floats go through their shortest repr so 45.5 becomes Decimal("45.5"),
    not the binary expansion.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidMetricValue(name, value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidMetricValue(name, value) from None
    if not result.is_finite() or result < 0:
        raise InvalidMetricValue(name, value)
    return result


def truncate_usage(value: Decimal) -> Decimal:
    """Truncate toward zero to three decimal places."""
    with localcontext() as ctx:
        ctx.prec = 60  # room for very large counts before quantizing
        return value.quantize(USAGE_DIGITS, rounding=ROUND_DOWN)


def clamp_at_zero(value: Decimal) -> Decimal:
    # Inputs are non-negative and limits positive, so this never fires for valid data
    return max(value, ZERO)


@dataclass(frozen=True)
class ClusterSnapshot:
    """Aggregated cluster metrics at a single point in time."""
    ingress: Any  # MBps
    egress: Any  # MBps
    connections: Any
    partitions: Any
    request_rate: Any = 0  # requests/sec, informational only

    def __post_init__(self):
        for snapshot_field in fields(self):
            to_decimal(getattr(self, snapshot_field.name), snapshot_field.name)

    def value(self, metric: Metric) -> Any:
        return getattr(self, metric.value)

    def as_dict(self) -> Dict[str, float]:
        return {metric.value: float(self.value(metric)) for metric in Metric}


@dataclass(frozen=True)
class TierUsage:
    """Fractions of one elastic tier's limits consumed by the workload."""
    tier: Tier
    fractions: Mapping[Metric, Decimal]
    usage: Decimal
    constraining_metric: Metric


@dataclass(frozen=True)
class DedicatedUsage:
    """CKUs of the Dedicated tier consumed by the workload."""
    units: Mapping[Metric, Decimal]
    usage: Decimal
    constraining_metric: Metric
    max_units: Decimal


@dataclass(frozen=True)
class Recommendation:
    """Result of one classification run."""
    tier: Tier
    classifications: Mapping[Metric, Tier]
    unbounded_metrics: Tuple[Metric, ...]
    recommended_usage: Optional[TierUsage]
    enterprise_usage: TierUsage
    freight_usage: TierUsage
    dedicated_usage: DedicatedUsage
    snapshot: ClusterSnapshot
    adjusted_values: Mapping[Metric, Decimal] = field(default_factory=lambda: MappingProxyType({}))
    safety_margin: Decimal = ZERO

    @property
    def is_unbounded(self) -> bool:
        return self.tier is Tier.NONE

    @property
    def constraining_metric(self) -> Optional[Metric]:
        return self.recommended_usage.constraining_metric if self.recommended_usage else None

    @property
    def estimated_usage(self) -> Optional[Decimal]:
        return self.recommended_usage.usage if self.recommended_usage else None


def validate_margin(margin_percent: Any) -> Decimal:
    if isinstance(margin_percent, bool) or not isinstance(margin_percent, (int, float, str, Decimal)):
        raise InvalidMargin(margin_percent)
    try:
        margin = margin_percent if isinstance(margin_percent, Decimal) else Decimal(str(margin_percent))
    except InvalidOperation:
        raise InvalidMargin(margin_percent) from None
    if not margin.is_finite() or margin < 0:
        raise InvalidMargin(margin_percent)
    return margin


def adjust(value: Any, margin_percent: Any) -> Decimal:
    """
    Apply the safety margin to a raw metric value.

    Args:
        value (number): Observed, non-negative metric value
        margin_percent (number): Safety margin percentage (>= 0)

    Returns:
        Decimal: value * (1 + margin_percent / 100)
    """
    margin = validate_margin(margin_percent)
    return to_decimal(value) * (1 + margin / HUNDRED)


def classify(metric: Metric, adjusted_value: Any, limits: TierLimitTable = DEFAULT_LIMITS) -> Tier:
    """
    Find the cheapest elastic tier whose limit for `metric` accommodates the value.

    The boundary is inclusive. Returns Tier.NONE when the value exceeds every
    elastic tier. UnknownLimit propagates from the table.
    """
    value = to_decimal(adjusted_value, metric.value)
    for tier in ELASTIC_TIERS:
        if value <= limits.limit(tier, metric):
            return tier
    return Tier.NONE


def resolve(classifications: Mapping[Metric, Tier]) -> Tier:
    """Combine per-metric classifications: the most restrictive tier wins."""
    missing = [metric.value for metric in CLASSIFIED_METRICS if metric not in classifications]
    if missing:
        raise ValueError(f"Missing classifications for: {', '.join(missing)}")
    return max((classifications[metric] for metric in CLASSIFIED_METRICS), key=tier_priority)


def unbounded_metrics(classifications: Mapping[Metric, Tier]) -> Tuple[Metric, ...]:
    """Metrics whose adjusted value exceeds every elastic tier's limit."""
    return tuple(metric for metric in CLASSIFIED_METRICS if classifications.get(metric) is Tier.NONE)


def _constraining(values: Mapping[Metric, Decimal]) -> Metric:
    # First metric (in classified order) to reach the maximum wins ties
    constraining = CLASSIFIED_METRICS[0]
    for metric in CLASSIFIED_METRICS[1:]:
        if values[metric] > values[constraining]:
            constraining = metric
    return constraining


def usage_fraction(tier: Tier, metric: Metric, adjusted_value: Any,
                   limits: TierLimitTable = DEFAULT_LIMITS) -> Decimal:
    """Fraction of an elastic tier's limit consumed, truncated to three decimals."""
    if tier not in ELASTIC_TIERS:
        raise ValueError(f"Usage fractions are only defined for elastic tiers, not '{tier.value}'")
    value = to_decimal(adjusted_value, metric.value)
    return clamp_at_zero(truncate_usage(value / limits.limit(tier, metric)))


def tier_usage(tier: Tier, adjusted_values: Mapping[Metric, Decimal],
               limits: TierLimitTable = DEFAULT_LIMITS) -> TierUsage:
    """
    Evaluate all classified metrics against a single elastic tier.

    Args:
        tier (Tier): Elastic tier to evaluate
        adjusted_values (mapping): Safety-margin adjusted value per metric
        limits (TierLimitTable): Limit table

    Returns:
        TierUsage: per-metric fractions, the maximum fraction and the metric behind it
    """
    fractions = {
        metric: usage_fraction(tier, metric, adjusted_values[metric], limits)
        for metric in CLASSIFIED_METRICS
    }
    constraining = _constraining(fractions)
    return TierUsage(tier=tier, fractions=MappingProxyType(fractions), usage=fractions[constraining],
                     constraining_metric=constraining)


def dedicated_usage(metric: Metric, adjusted_value: Any, limits: TierLimitTable = DEFAULT_LIMITS) -> Decimal:
    """
    CKUs consumed on a Dedicated cluster for one metric.

    Dedicated capacity is bought in whole CKUs, so this is an absolute count
    out of `max_units`, not a 0-1 fraction. The share of the Dedicated limit
    is truncated to three decimals before scaling by `max_units`.
    """
    share = truncate_usage(to_decimal(adjusted_value, metric.value) / limits.dedicated_limit(metric))
    return clamp_at_zero(share * limits.max_units)


def dedicated_tier_usage(adjusted_values: Mapping[Metric, Decimal],
                         limits: TierLimitTable = DEFAULT_LIMITS) -> DedicatedUsage:
    units = {metric: dedicated_usage(metric, adjusted_values[metric], limits) for metric in CLASSIFIED_METRICS}
    constraining = _constraining(units)
    return DedicatedUsage(units=MappingProxyType(units), usage=units[constraining], constraining_metric=constraining,
                          max_units=limits.max_units)


def adjust_snapshot(snapshot: ClusterSnapshot, margin_percent: Any) -> Dict[Metric, Decimal]:
    """Adjust every classified metric of a snapshot once."""
    return {metric: adjust(snapshot.value(metric), margin_percent) for metric in CLASSIFIED_METRICS}


def generate_recommendation(snapshot: ClusterSnapshot, safety_margin: Any,
                            limits: TierLimitTable = DEFAULT_LIMITS) -> Recommendation:
    """
    Run the full classification for one snapshot.

    Args:
        snapshot (ClusterSnapshot): Aggregated cluster metrics
        safety_margin (number): Safety margin percentage applied to every metric
        limits (TierLimitTable): Limit table, defaults to the published limits

    Returns:
        Recommendation: overall tier, per-metric tiers and usage figures

    Raises:
        InvalidMargin: if the safety margin is negative
        ConfigurationError: if the limit table lacks a required entry
    """
    margin = validate_margin(safety_margin)
    adjusted = adjust_snapshot(snapshot, margin)
    for metric, value in adjusted.items():
        logger.debug("Adjusted %s: current=%s, adjusted=%s", metric.value, snapshot.value(metric), value)

    classifications = {metric: classify(metric, adjusted[metric], limits) for metric in CLASSIFIED_METRICS}
    recommended = resolve(classifications)
    unbounded = unbounded_metrics(classifications)

    recommended_usage: Optional[TierUsage] = None
    if recommended is Tier.NONE:
        logger.warning("Workload exceeds every cluster type limit for: %s",
                       ", ".join(metric.value for metric in unbounded))
    else:
        recommended_usage = tier_usage(recommended, adjusted, limits)
        logger.debug("Recommended %s at %s eCKUs, constrained by %s", recommended.value,
                     recommended_usage.usage, recommended_usage.constraining_metric.value)

    return Recommendation(
        tier=recommended,
        classifications=MappingProxyType(classifications),
        unbounded_metrics=unbounded,
        recommended_usage=recommended_usage,
        enterprise_usage=tier_usage(Tier.ENTERPRISE, adjusted, limits),
        freight_usage=tier_usage(Tier.FREIGHT, adjusted, limits),
        dedicated_usage=dedicated_tier_usage(adjusted, limits),
        snapshot=snapshot,
        adjusted_values=MappingProxyType(adjusted),
        safety_margin=margin,
    )
