from prometheus_client import Counter, Histogram

from src.ports.secondary.metrics import IMetrics


class MetricsRegistry(IMetrics):
    """Prometheus metrics registry."""

    def __init__(self):
        # Resolver metrics
        self.WORKFLOW_RESOLUTIONS_TOTAL = Counter(
            "workflow_resolutions_total",
            "Total number of workflow reference submissions by outcome",
            ["outcome"],
        )

        self.WORKFLOW_BUILD_DURATION_SECONDS = Histogram(
            "workflow_build_duration_seconds",
            "Time taken to build a workflow record from GitHub",
            ["status"],
            buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
        )

        # Download metrics
        self.BUNDLE_DOWNLOADS_TOTAL = Counter(
            "bundle_downloads_total",
            "Total number of Research Object bundle download requests by outcome",
            ["outcome"],
        )

    def record_resolution(self, outcome: str):
        self.WORKFLOW_RESOLUTIONS_TOTAL.labels(outcome=outcome).inc()

    def record_build_duration(self, status: str, duration: float):
        self.WORKFLOW_BUILD_DURATION_SECONDS.labels(status=status).observe(duration)

    def record_download(self, outcome: str):
        self.BUNDLE_DOWNLOADS_TOTAL.labels(outcome=outcome).inc()


# Global registry instance for adapter/framework layer
metrics_registry = MetricsRegistry()
