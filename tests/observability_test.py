import json

import pytest
import structlog
from opentelemetry.sdk.trace import TracerProvider

from inliner.core import telemetry
from inliner.core.logging import add_trace_context, configure_logging
from inliner.core.telemetry import setup_telemetry


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_trace_ids_added_inside_span():
    tracer = TracerProvider().get_tracer("test")

    with tracer.start_as_current_span("inliner.poll"):
        event = add_trace_context(None, "info", {"event": "asset_ready"})

    assert len(event["trace_id"]) == 32
    assert len(event["span_id"]) == 16


def test_no_trace_ids_outside_span():
    assert add_trace_context(None, "info", {"event": "asset_ready"}) == {"event": "asset_ready"}


def test_json_logs(capsys, reset_structlog):
    configure_logging(json_logs=True)

    structlog.get_logger().info("asset_ready", content_path="proj/a.png")

    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "asset_ready"
    assert line["content_path"] == "proj/a.png"
    assert line["level"] == "info"
    assert "timestamp" in line


def test_level_filtering(capsys, reset_structlog):
    configure_logging(json_logs=True, level="warning")

    logger = structlog.get_logger()
    logger.info("asset_processing")
    logger.warning("cdn_fetch_failed")

    out = capsys.readouterr().out
    assert "asset_processing" not in out
    assert "cdn_fetch_failed" in out


def test_setup_telemetry_installs_sdk_provider(monkeypatch):
    installed = []
    monkeypatch.setattr(telemetry.trace, "set_tracer_provider", installed.append)

    setup_telemetry("inliner-test")

    provider = installed[0]
    assert isinstance(provider, TracerProvider)
    assert provider.resource.attributes["service.name"] == "inliner-test"
    provider.shutdown()
