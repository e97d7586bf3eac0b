"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field

from .logger import init_logging, shutdown_logging
from .metrics import init_metrics, shutdown_metrics
from .tracer import init_tracing, shutdown_tracing

_TRUTHY = {"1", "true", "yes", "on"}

_TOGGLE_ENV = {
    "enable_tracing": ("BROADSIDE_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
    "enable_metrics": ("BROADSIDE_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
    "enable_logging": ("BROADSIDE_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
}

_ENDPOINT_ENV = {
    "otlp_traces_endpoint": ("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", "v1/traces"),
    "otlp_metrics_endpoint": ("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT", "v1/metrics"),
    "otlp_logs_endpoint": ("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "v1/logs"),
}


def env_flag(*names: str) -> bool | None:
    """Return the first boolean found among ``names``, or None if none is set."""
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in _TRUTHY
    return None


class TelemetryConfig(BaseModel):
    """Which telemetry exporters to run and where they send data."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "broadside"
    service_namespace: str = "console-game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @property
    def resource(self) -> dict[str, str]:
        """Resource attributes shared by every exporter."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> TelemetryConfig:
        """Build a config from ``BROADSIDE_*`` and standard ``OTEL_*`` variables."""

        data: dict[str, Any] = {}

        for field, env_names in _TOGGLE_ENV.items():
            flag = env_flag(*env_names)
            if flag is not None:
                data[field] = flag

        base_endpoint = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").rstrip("/")
        for field, (env_name, suffix) in _ENDPOINT_ENV.items():
            endpoint = os.getenv(env_name) or (f"{base_endpoint}/{suffix}" if base_endpoint else None)
            if endpoint:
                data[field] = endpoint

        if os.getenv("OTEL_SERVICE_NAME"):
            data["service_name"] = os.environ["OTEL_SERVICE_NAME"]
        if os.getenv("OTEL_SERVICE_NAMESPACE"):
            data["service_namespace"] = os.environ["OTEL_SERVICE_NAMESPACE"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES", "")
        attributes: dict[str, str] = {}
        for part in resource_env.split(","):
            key, sep, value = part.partition("=")
            if sep:
                attributes[key.strip()] = value.strip()
        if attributes:
            data["resource_attributes"] = attributes

        # An endpoint implies the matching exporter is wanted.
        if data.get("otlp_traces_endpoint"):
            data["enable_tracing"] = True
        if data.get("otlp_metrics_endpoint"):
            data["enable_metrics"] = True
        if data.get("otlp_logs_endpoint"):
            data["enable_logging"] = True

        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Start the enabled telemetry subsystems."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved


def shutdown_telemetry() -> None:
    """Flush and stop whatever ``init_telemetry`` started."""

    shutdown_tracing()
    shutdown_metrics()
    shutdown_logging()
