"""Prometheus metrics for mini-s3."""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, REGISTRY


class StorageMetrics:
    """Metrics collector for the storage engine."""

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        # Object Operations
        self.objects_saved = Counter(
            "mini_s3_objects_saved_total",
            "Total objects saved",
            ["bucket"],
            registry=registry,
        )
        self.objects_read = Counter(
            "mini_s3_objects_read_total",
            "Total objects read after checksum verification",
            ["bucket"],
            registry=registry,
        )
        self.objects_deleted = Counter(
            "mini_s3_objects_deleted_total",
            "Total objects deleted",
            ["bucket"],
            registry=registry,
        )
        self.bytes_uploaded = Counter(
            "mini_s3_bytes_uploaded_total",
            "Total bytes written by save",
            ["bucket"],
            registry=registry,
        )
        self.bytes_verified = Counter(
            "mini_s3_bytes_verified_total",
            "Total bytes re-read to verify checksums",
            ["bucket"],
            registry=registry,
        )

        # Integrity
        self.checksum_verifications = Counter(
            "mini_s3_checksum_verifications_total",
            "Total checksum verifications",
            ["result"],
            registry=registry,
        )
        self.integrity_errors = Counter(
            "mini_s3_integrity_errors_total",
            "Total data integrity errors",
            ["bucket"],
            registry=registry,
        )

        # Latency
        self.save_latency = Histogram(
            "mini_s3_save_latency_seconds",
            "Save latency",
            ["bucket"],
            buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
            registry=registry,
        )
        self.get_latency = Histogram(
            "mini_s3_get_latency_seconds",
            "Verified get latency",
            ["bucket"],
            buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
            registry=registry,
        )
        self.delete_latency = Histogram(
            "mini_s3_delete_latency_seconds",
            "Delete latency",
            ["bucket"],
            buckets=[0.0001, 0.001, 0.01, 0.05, 0.1],
            registry=registry,
        )
        self.list_latency = Histogram(
            "mini_s3_list_latency_seconds",
            "List objects latency",
            ["bucket"],
            buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0],
            registry=registry,
        )

        # Errors
        self.request_errors = Counter(
            "mini_s3_request_errors_total",
            "Total failed storage operations",
            ["operation", "error_type"],
            registry=registry,
        )

        # System Info
        self.system_info = Info(
            "mini_s3",
            "mini-s3 system information",
            registry=registry,
        )


_metrics: StorageMetrics | None = None


def get_metrics() -> StorageMetrics:
    """Get the singleton metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = StorageMetrics()
    return _metrics
