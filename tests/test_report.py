"""Tests for report formatting."""

import json
from datetime import datetime, timezone

import pytest

from cku_sizing.calculate_sizing import ClusterSnapshot, generate_recommendation
from cku_sizing.report import (
    build_json_report,
    format_csv_report,
    format_report,
    format_table_report,
)


@pytest.fixture
def recommendation(sample_snapshot):
    return generate_recommendation(sample_snapshot, 20)


@pytest.fixture
def unbounded_recommendation():
    snapshot = ClusterSnapshot(ingress=8000, egress=20, connections=100, partitions=50)
    return generate_recommendation(snapshot, 20)


class TestTableReport:
    def test_metric_rows(self, recommendation):
        report = format_table_report(recommendation)
        lines = report.splitlines()
        ingress = next(line for line in lines if "Ingress Throughput" in line)
        assert "45.50 MBps" in ingress
        assert "basic" in ingress
        assert "0.218" in ingress
        connections = next(line for line in lines if "Active Connections" in line)
        assert "6500" in connections
        assert "standard" in connections
        partitions = next(line for line in lines if "Total Partitions" in line)
        assert "0.937" in partitions

    def test_summary(self, recommendation):
        report = format_table_report(recommendation)
        assert "Minimum Required: STANDARD" in report
        assert "Estimated Usage in STANDARD: 0.937 eCKUs" in report
        assert "Constraining Metric: partitions" in report
        assert "0.173 eCKUs" in report
        assert "0.076 eCKUs" in report
        assert "5.8 CKUs of 152 maximum" in report
        assert "Safety margin applied: 20%" in report
        assert "Suitable for most production workloads" in report

    def test_box_lines_are_aligned(self, recommendation):
        lines = [line for line in format_table_report(recommendation).splitlines() if line and line[0] in "║╔╠╚"]
        assert lines
        assert {len(line) for line in lines} == {81}

    def test_no_colour_by_default(self, recommendation):
        assert "\033[" not in format_table_report(recommendation)

    def test_colour(self, recommendation):
        report = format_table_report(recommendation, color=True)
        assert "\033[0;36m" in report
        assert "\033[0m" in report

    def test_unbounded(self, unbounded_recommendation):
        report = format_table_report(unbounded_recommendation)
        assert "Minimum Required: NONE" in report
        assert "N/A" in report
        assert "Metrics exceeding every cluster type: ingress" in report
        assert "WARNING: Workload exceeds all cluster type limits!" in report
        assert "Estimated Usage in" not in report

    def test_fractional_margin(self, sample_snapshot):
        report = format_table_report(generate_recommendation(sample_snapshot, 12.5))
        assert "Safety margin applied: 12.5%" in report


class TestJsonReport:
    def test_structure(self, recommendation):
        timestamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        report = build_json_report(recommendation, timestamp)
        assert report["timestamp"] == "2024-01-02T03:04:05+00:00"
        assert report["cluster_metrics"] == {
            "ingress_mbps": 45.5,
            "egress_mbps": 125.75,
            "connections": 6500.0,
            "partitions": 3200.0,
            "requests_per_sec": 8500.0,
        }
        assert report["cluster_type_requirements"] == {
            "ingress": "basic", "egress": "basic", "connections": "standard", "partitions": "basic",
        }

    def test_usage_by_cluster_type(self, recommendation):
        usage = build_json_report(recommendation)["usage_by_cluster_type"]
        assert usage["enterprise"]["estimated_eckus"] == 0.173
        assert usage["enterprise"]["constraining_metric"] == "connections"
        assert usage["freight"]["estimated_eckus"] == 0.076
        assert usage["dedicated"]["estimated_ckus"] == 5.776
        assert usage["dedicated"]["billing_model"] == "CKU"
        assert usage["dedicated"]["max_limit"] == "152 CKU"

    def test_recommendation(self, recommendation):
        result = build_json_report(recommendation)["recommendation"]
        assert result["cluster_type"] == "standard"
        assert result["estimated_eckus"] == 0.937
        assert result["constraining_metric"] == "partitions"
        assert result["unbounded_metrics"] == []
        assert result["safety_margin_percent"] == 20.0
        assert result["elastic_scaling"] is True
        assert set(result["notes"]) == {"basic", "standard", "enterprise", "freight"}

    def test_unbounded(self, unbounded_recommendation):
        result = build_json_report(unbounded_recommendation)["recommendation"]
        assert result["cluster_type"] == "none"
        assert result["estimated_eckus"] is None
        assert result["constraining_metric"] == "none"
        assert result["unbounded_metrics"] == ["ingress"]

    def test_serialises(self, recommendation):
        document = json.loads(format_report(recommendation, "json"))
        assert document["recommendation"]["cluster_type"] == "standard"


class TestCsvReport:
    def test_rows(self, recommendation):
        assert format_csv_report(recommendation).splitlines() == [
            "metric,current_value,unit,min_cluster_type",
            "ingress,45.50,MBps,basic",
            "egress,125.75,MBps,basic",
            "connections,6500,count,standard",
            "partitions,3200,count,basic",
            "recommendation,standard,cluster_type,final",
            "",
            "cluster_type,estimated_usage,billing_model,notes",
            "enterprise,0.173 eCKUs,eCKU,10 eCKU limit (32 eCKU Limited Availability)",
            "freight,0.076 eCKUs,eCKU,Ultra-high performance",
            "dedicated,5.8 CKUs,CKU,Fixed capacity (152 CKU max)",
        ]

    def test_unbounded_recommendation_row(self, unbounded_recommendation):
        assert "recommendation,none,cluster_type,final" in format_csv_report(unbounded_recommendation)

    def test_dispatch(self, recommendation):
        assert format_report(recommendation, "csv") == format_csv_report(recommendation)
        assert format_report(recommendation, "table") == format_table_report(recommendation)
