"""
Exceptions raised by the CKU sizing tool.

Every error the tool raises on purpose derives from SizingError so the
command line can report it and exit cleanly. A metric that exceeds every
elastic tier is not an error: it classifies as Tier.NONE.
"""


class SizingError(Exception):
    """Base class for all sizing tool errors"""


class InvalidMargin(SizingError, ValueError):
    """Safety margin percentage is negative or not a number"""

    def __init__(self, margin):
        self.margin = margin
        super().__init__(f"Safety margin must be a non-negative percentage, got {margin!r}")


class InvalidMetricValue(SizingError, ValueError):
    """Metric value is negative, non-finite or not a number"""

    def __init__(self, name, value):
        self.name = name
        self.value = value
        super().__init__(f"Metric '{name}' must be a non-negative finite number, got {value!r}")


class ConfigurationError(SizingError):
    """Limit table or configuration file is incomplete or invalid"""


class UnknownLimit(ConfigurationError):
    """No limit is configured for the requested (tier, metric) pair"""

    def __init__(self, tier, metric):
        self.tier = tier
        self.metric = metric
        tier_name = getattr(tier, "value", tier)
        metric_name = getattr(metric, "value", metric)
        super().__init__(f"No limit configured for tier '{tier_name}' and metric '{metric_name}'")


class CollectionError(SizingError):
    """Broker metrics could not be collected"""
