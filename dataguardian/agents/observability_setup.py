"""
Agent Framework observability configuration.

Exports OpenTelemetry traces, logs and metrics to Azure
Application Insights when ``APPLICATIONINSIGHTS_CONNECTION_STRING``
is set.  Without it telemetry stays off.
"""

from __future__ import annotations

import os
from typing import Any, cast

from agent_framework import observability
from azure.monitor.opentelemetry import exporter

from dataguardian.utils import logger

log = logger.create_logger("Observability")


def setup() -> bool:
    """Configure telemetry export; returns whether it was enabled."""
    connection_string = os.getenv("APPLICATIONINSIGHTS_CONNECTION_STRING")
    if not connection_string:
        log.debug("APPLICATIONINSIGHTS_CONNECTION_STRING not set, telemetry disabled")
        return False

    exporters = [
        exporter.AzureMonitorTraceExporter(connection_string=connection_string),
        exporter.AzureMonitorLogExporter(connection_string=connection_string),
        exporter.AzureMonitorMetricExporter(connection_string=connection_string),
    ]
    observability.configure_otel_providers(exporters=cast(list[Any], exporters))

    log.success("Agent Framework observability configured with Azure Monitor")
    return True
