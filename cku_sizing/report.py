"""
CKU Sizing Tool - Report Formatting

Renders a Recommendation as a boxed text table, a JSON document or CSV rows.
Usage fractions are shown with three decimals, Dedicated CKUs with one.
"""

import csv
import io
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .calculate_sizing import Recommendation
from .limits import CLASSIFIED_METRICS, METRIC_UNITS, Metric, Tier

# ANSI colour codes
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
PURPLE = "\033[0;35m"
CYAN = "\033[0;36m"
NC = "\033[0m"

TIER_COLORS: Dict[Tier, str] = {
    Tier.BASIC: BLUE,
    Tier.STANDARD: CYAN,
    Tier.ENTERPRISE: YELLOW,
    Tier.FREIGHT: PURPLE,
    Tier.NONE: RED,
}

METRIC_LABELS: Dict[Metric, str] = {
    Metric.INGRESS: "Ingress Throughput",
    Metric.EGRESS: "Egress Throughput",
    Metric.CONNECTIONS: "Active Connections",
    Metric.PARTITIONS: "Total Partitions",
}

TIER_NOTES: Dict[Tier, str] = {
    Tier.BASIC: "Development and light production workloads",
    Tier.STANDARD: "Most production workloads",
    Tier.ENTERPRISE: "High-throughput production with SLA requirements (10 eCKU limit, 32 eCKU in Limited Availability)",
    Tier.FREIGHT: "Ultra-high throughput for mission-critical applications",
}

ENTERPRISE_MAX_LIMIT = "10 eCKU (32 eCKU Limited Availability)"
FREIGHT_MAX_LIMIT = "No published limit"


def _format_value(metric: Metric, value: Any) -> str:
    if METRIC_UNITS[metric] == "MBps":
        return f"{float(value):12.2f} MBps"
    return f"{float(value):17.0f}"


def format_table_report(recommendation: Recommendation, color: bool = False) -> str:
    """
    Format a recommendation as a boxed text table with a summary and notes

    Args:
        recommendation (Recommendation): Classification result
        color (bool): Emit ANSI colour codes

    Returns:
        str: Formatted report
    """
    def paint(code: str, text: str) -> str:
        return f"{code}{text}{NC}" if color else text

    tier = recommendation.tier
    tier_name = tier.value.upper()
    border = paint(CYAN, "║")
    report: List[str] = []

    report.append("")
    report.append(paint(CYAN, "╔" + "═" * 79 + "╗"))
    report.append(paint(CYAN, "║" + "eCKU CLUSTER RECOMMENDATION".center(79) + "║"))
    report.append(paint(CYAN, "╠" + "═" * 79 + "╣"))
    report.append(f"{border} {'Metric':<25} │ {'Current Usage':>17} │ {'Min Cluster Type':>16} │ {'eCKU Usage':>10} {border}")
    report.append(paint(CYAN, "╠" + "═" * 27 + "╪" + "═" * 19 + "╪" + "═" * 18 + "╪" + "═" * 12 + "╣"))

    for metric in CLASSIFIED_METRICS:
        usage = recommendation.recommended_usage.fractions[metric] if recommendation.recommended_usage else 0
        report.append(
            f"{border} {METRIC_LABELS[metric]:<25} │ {_format_value(metric, recommendation.snapshot.value(metric))} │ "
            f"{recommendation.classifications[metric].value:>16} │ {float(usage):10.3f} {border}"
        )

    report.append(paint(CYAN, "╠" + "═" * 27 + "╪" + "═" * 19 + "╪" + "═" * 18 + "╪" + "═" * 12 + "╣"))
    estimated = f"{float(recommendation.estimated_usage):10.3f}" if recommendation.estimated_usage is not None else f"{'N/A':>10}"
    report.append(
        f"{border} {'RECOMMENDATION':<25} │ {'':>17} │ {paint(TIER_COLORS[tier], f'{tier_name:>16}')} │ "
        f"{paint(GREEN, estimated)} {border}"
    )
    report.append(paint(CYAN, "╚" + "═" * 27 + "╧" + "═" * 19 + "╧" + "═" * 18 + "╧" + "═" * 12 + "╝"))

    report.append("")
    report.append(paint(YELLOW, "Recommendation Summary:"))
    report.append(f"  • Minimum Required: {paint(TIER_COLORS[tier], tier_name)}")
    if recommendation.recommended_usage is not None:
        report.append(f"  • Estimated Usage in {tier_name}: {paint(GREEN, f'{float(recommendation.estimated_usage):.3f} eCKUs')}")
        report.append(f"  • Constraining Metric: {paint(YELLOW, recommendation.constraining_metric.value)}")
    else:
        unbounded = ", ".join(metric.value for metric in recommendation.unbounded_metrics)
        report.append(f"  • Metrics exceeding every cluster type: {paint(RED, unbounded)}")

    dedicated = recommendation.dedicated_usage
    report.append("")
    report.append(paint(CYAN, "Usage Across All Cluster Types:"))
    report.append(f"  • {paint(YELLOW, 'Enterprise')}: {float(recommendation.enterprise_usage.usage):.3f} eCKUs "
                  f"(limit: 10 eCKU, 32 eCKU in Limited Availability)")
    report.append(f"  • {paint(PURPLE, 'Freight')}:    {float(recommendation.freight_usage.usage):.3f} eCKUs "
                  f"(high-performance, ultra-low latency)")
    report.append(f"  • {paint(BLUE, 'Dedicated')}:  {float(dedicated.usage):.1f} CKUs of {int(dedicated.max_units)} maximum "
                  f"(fixed capacity, not elastic)")

    report.append("")
    report.append(paint(YELLOW, "Notes:"))
    report.append(f"  • Safety margin applied: {recommendation.safety_margin.normalize():f}%")
    report.append("  • eCKU clusters are elastic - you pay for what you use up to limits")
    report.append("  • Based on peak usage patterns, consider burst capacity")
    report.append("  • Storage is unlimited for all cluster types")

    if tier is Tier.BASIC:
        report.append(f"  • {paint(BLUE, 'Basic')}: Good for development and light production workloads")
    elif tier is Tier.STANDARD:
        report.append(f"  • {paint(CYAN, 'Standard')}: Suitable for most production workloads")
    elif tier is Tier.ENTERPRISE:
        report.append(f"  • {paint(YELLOW, 'Enterprise')}: High-throughput production workloads with SLA requirements")
        report.append("  • Current limit: 10 eCKU (32 eCKU available in Limited Availability)")
    elif tier is Tier.FREIGHT:
        report.append(f"  • {paint(PURPLE, 'Freight')}: Ultra-high throughput for mission-critical applications")
        report.append("  • Optimized for maximum performance and lowest latency")
    else:
        report.append(f"  • {paint(RED, 'WARNING')}: Workload exceeds all cluster type limits!")
        report.append("  • Consider workload optimization or contact Confluent for custom solutions")

    return "\n".join(report)


def build_json_report(recommendation: Recommendation, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Structured report; numbers are plain floats, a missing usage is null."""
    timestamp = timestamp or datetime.now(timezone.utc)
    snapshot = recommendation.snapshot
    dedicated = recommendation.dedicated_usage
    return {
        "timestamp": timestamp.isoformat(timespec="seconds"),
        "cluster_metrics": {
            "ingress_mbps": float(snapshot.ingress),
            "egress_mbps": float(snapshot.egress),
            "connections": float(snapshot.connections),
            "partitions": float(snapshot.partitions),
            "requests_per_sec": float(snapshot.request_rate),
        },
        "cluster_type_requirements": {
            metric.value: recommendation.classifications[metric].value for metric in CLASSIFIED_METRICS
        },
        "usage_by_cluster_type": {
            "enterprise": {
                "estimated_eckus": float(recommendation.enterprise_usage.usage),
                "constraining_metric": recommendation.enterprise_usage.constraining_metric.value,
                "billing_model": "eCKU",
                "max_limit": ENTERPRISE_MAX_LIMIT,
            },
            "freight": {
                "estimated_eckus": float(recommendation.freight_usage.usage),
                "constraining_metric": recommendation.freight_usage.constraining_metric.value,
                "billing_model": "eCKU",
                "max_limit": FREIGHT_MAX_LIMIT,
            },
            "dedicated": {
                "estimated_ckus": float(dedicated.usage),
                "constraining_metric": dedicated.constraining_metric.value,
                "billing_model": "CKU",
                "max_limit": f"{int(dedicated.max_units)} CKU",
            },
        },
        "recommendation": {
            "cluster_type": recommendation.tier.value,
            "estimated_eckus": float(recommendation.estimated_usage) if recommendation.estimated_usage is not None else None,
            "constraining_metric": recommendation.constraining_metric.value if recommendation.constraining_metric else "none",
            "unbounded_metrics": [metric.value for metric in recommendation.unbounded_metrics],
            "billing_model": "eCKU",
            "elastic_scaling": True,
            "safety_margin_percent": float(recommendation.safety_margin),
            "notes": {tier.value: note for tier, note in TIER_NOTES.items()},
        },
    }


def format_json_report(recommendation: Recommendation, timestamp: Optional[datetime] = None) -> str:
    return json.dumps(build_json_report(recommendation, timestamp), indent=2)


def format_csv_report(recommendation: Recommendation) -> str:
    """Metric rows, then cluster-type usage rows, separated by a blank line."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["metric", "current_value", "unit", "min_cluster_type"])
    for metric in CLASSIFIED_METRICS:
        value = recommendation.snapshot.value(metric)
        current = f"{float(value):.2f}" if METRIC_UNITS[metric] == "MBps" else f"{float(value):.0f}"
        writer.writerow([metric.value, current, METRIC_UNITS[metric], recommendation.classifications[metric].value])
    writer.writerow(["recommendation", recommendation.tier.value, "cluster_type", "final"])
    writer.writerow([])
    writer.writerow(["cluster_type", "estimated_usage", "billing_model", "notes"])
    writer.writerow(["enterprise", f"{float(recommendation.enterprise_usage.usage):.3f} eCKUs", "eCKU",
                     "10 eCKU limit (32 eCKU Limited Availability)"])
    writer.writerow(["freight", f"{float(recommendation.freight_usage.usage):.3f} eCKUs", "eCKU",
                     "Ultra-high performance"])
    dedicated = recommendation.dedicated_usage
    writer.writerow(["dedicated", f"{float(dedicated.usage):.1f} CKUs", "CKU",
                     f"Fixed capacity ({int(dedicated.max_units)} CKU max)"])
    return buffer.getvalue()


def format_report(recommendation: Recommendation, output_format: str, color: bool = False) -> str:
    if output_format == "json":
        return format_json_report(recommendation)
    if output_format == "csv":
        return format_csv_report(recommendation)
    return format_table_report(recommendation, color=color)
