"""Shared fixtures for the CKU sizing tests."""

import pytest

from cku_sizing.calculate_sizing import ClusterSnapshot
from cku_sizing.limits import DEFAULT_DEDICATED_LIMITS, DEFAULT_ELASTIC_LIMITS, DEFAULT_DEDICATED_MAX_UNITS


@pytest.fixture
def sample_snapshot():
    """The sample workload used by --dry-run."""
    return ClusterSnapshot(ingress=45.50, egress=125.75, connections=6500, partitions=3200, request_rate=8500)


@pytest.fixture
def small_snapshot():
    """A workload that fits every metric on Basic."""
    return ClusterSnapshot(ingress=10, egress=20, connections=100, partitions=50, request_rate=100)


@pytest.fixture
def raw_elastic_limits():
    return {tier: dict(limits) for tier, limits in DEFAULT_ELASTIC_LIMITS.items()}


@pytest.fixture
def raw_dedicated_limits():
    return dict(DEFAULT_DEDICATED_LIMITS)


@pytest.fixture
def max_units():
    return DEFAULT_DEDICATED_MAX_UNITS
