"""
Metrics definitions for the shutdown tracker.

This module defines Prometheus metrics for monitoring
record mutations and the geocoding collaborator.
"""

from prometheus_client import Counter, Histogram, Gauge

# counters
mutations_total = Counter(
    "shutdown_mutations_total",
    "Number of successful shutdown record mutations",
    ["operation"]
)

mutations_rejected = Counter(
    "shutdown_mutations_rejected_total",
    "Number of shutdown mutations rejected before or during the write",
    ["operation", "reason"]
)

geocode_failures = Counter(
    "geocode_failures_total",
    "Number of geocoding lookups that failed or returned incomplete data"
)

access_level_changes = Counter(
    "user_access_level_changes_total",
    "Number of access level changes made by administrators",
    ["level"]
)

# histograms
geocode_seconds = Histogram(
    "geocode_duration_seconds",
    "Time spent waiting on the geocoding collaborator",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

# gauges
records_listed = Gauge(
    "shutdown_records_listed",
    "Number of records returned by the most recent full listing",
    ["status"]
)
