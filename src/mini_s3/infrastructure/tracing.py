"""OpenTelemetry tracing configuration for mini-s3."""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from mini_s3 import __version__
from mini_s3.infrastructure.config import Config, get_config


def setup_tracing(config: Config | None = None) -> trace.Tracer:
    """Configure OpenTelemetry tracing.

    Without ``enable_tracing`` no provider is installed and the returned
    tracer is the API's no-op tracer.
    """
    config = config or get_config()

    if not config.observability.enable_tracing:
        return get_tracer()

    resource = Resource.create(
        {
            "service.name": "mini_s3",
            "service.version": __version__,
            "deployment.environment": config.observability.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    if config.observability.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(
            endpoint=config.observability.otlp_endpoint,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    return get_tracer()


def get_tracer(name: str = "mini_s3") -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
