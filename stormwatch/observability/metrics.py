"""
Metrics definitions for StormWatch.

This module defines Prometheus metrics for monitoring
the alert processing pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
alerts_received = Counter(
    "stormwatch_alerts_received_total",
    "Number of alert deliveries received",
    ["source"]
)

reports_published = Counter(
    "stormwatch_reports_published_total",
    "Number of report/status artifacts published",
    ["status"]
)

publish_failures = Counter(
    "stormwatch_publish_failures_total",
    "Number of report/status artifacts that could not be published",
    ["status"]
)

invocation_failures = Counter(
    "stormwatch_invocation_failures_total",
    "Number of invocations that ended in a failed state",
    ["kind"]
)

regions_skipped = Counter(
    "stormwatch_regions_skipped_total",
    "Regions skipped because their boundary could not be tested"
)

artifact_exports = Counter(
    "stormwatch_artifact_exports_total",
    "Display artifact export attempts",
    ["result"]
)

# 히스토그램 메트릭
stage_seconds = Histogram(
    "stormwatch_stage_duration_seconds",
    "Time spent in each pipeline stage",
    ["stage"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

regions_at_risk = Histogram(
    "stormwatch_regions_at_risk",
    "Number of regions at risk per alert",
    buckets=[0, 1, 2, 5, 10, 25, 50, 100, 250]
)

end_to_end_seconds = Histogram(
    "stormwatch_end_to_end_duration_seconds",
    "Total processing latency per invocation",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0]
)

# 게이지 메트릭
catalog_size = Gauge(
    "stormwatch_catalog_regions",
    "Number of regions in the loaded catalog"
)

uptime_seconds = Gauge(
    "stormwatch_uptime_seconds",
    "Service uptime in seconds"
)
