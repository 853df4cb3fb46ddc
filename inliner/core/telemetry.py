from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter


def setup_telemetry(service_name: str = "inliner-client"):
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    # Swap ConsoleSpanExporter for an OTLP exporter to ship spans elsewhere
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)


tracer = trace.get_tracer("inliner")
