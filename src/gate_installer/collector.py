"""
OpenTelemetry collector configuration for a Gate deployment.

Gate pushes OTLP traces and metrics to a collector, which forwards traces to
Tempo and metrics to Prometheus via remote write. This module renders that
collector configuration and validates existing ones.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

SECTIONS = ("receivers", "processors", "exporters")


class CollectorConfigError(Exception):
    """Raised when a collector configuration cannot be loaded."""

    pass


def render_collector_config(
    tempo_endpoint: str = "tempo:4317",
    prometheus_endpoint: str = "http://prometheus:9090/api/v1/write",
    otlp_grpc: str = "0.0.0.0:4317",
    otlp_http: str = "0.0.0.0:4318",
) -> dict[str, Any]:
    """Build the push-mode collector configuration."""
    return {
        "receivers": {
            "otlp": {
                "protocols": {
                    "grpc": {"endpoint": otlp_grpc},
                    "http": {"endpoint": otlp_http},
                },
            },
        },
        "processors": {
            "batch": {"send_batch_size": 10000, "timeout": "10s"},
            "memory_limiter": {
                "check_interval": "1s",
                "limit_mib": 1000,
                "spike_limit_mib": 200,
            },
        },
        "exporters": {
            "otlp": {"endpoint": tempo_endpoint, "tls": {"insecure": True}},
            "prometheusremotewrite": {
                "endpoint": prometheus_endpoint,
                "tls": {"insecure": True},
            },
        },
        "service": {
            "pipelines": {
                "traces": {
                    "receivers": ["otlp"],
                    "processors": ["memory_limiter", "batch"],
                    "exporters": ["otlp"],
                },
                "metrics": {
                    "receivers": ["otlp"],
                    "processors": ["memory_limiter", "batch"],
                    "exporters": ["prometheusremotewrite"],
                },
            },
        },
    }


def write_collector_config(path: str | Path, **endpoints: str) -> Path:
    """Render the collector configuration and write it as YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(render_collector_config(**endpoints), f, sort_keys=False)
    logger.debug(f"Wrote collector config to {path}")
    return path


def load_collector_config(path: str | Path) -> dict[str, Any]:
    """Load a collector configuration file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CollectorConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CollectorConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise CollectorConfigError(f"{path} does not contain a mapping")
    return data


def _component_type(name: str) -> str:
    # "otlp/tempo" is an instance of the "otlp" component
    return name.split("/", 1)[0]


def validate_collector_config(data: dict[str, Any]) -> list[str]:
    """
    Check a collector configuration for wiring problems.

    Returns:
        List of problems; empty when the configuration is consistent.
    """
    problems: list[str] = []

    defined = {}
    for section in SECTIONS:
        value = data.get(section) or {}
        if not isinstance(value, dict):
            problems.append(f"'{section}' must be a mapping")
            value = {}
        defined[section] = set(value)

    service = data.get("service") or {}
    if not isinstance(service, dict):
        problems.append("'service' must be a mapping")
        return problems

    pipelines = service.get("pipelines") or {}
    if not isinstance(pipelines, dict):
        problems.append("service.pipelines must be a mapping")
        return problems
    if not pipelines:
        problems.append("service.pipelines is empty")
        return problems

    for name, pipeline in pipelines.items():
        if _component_type(str(name)) not in ("traces", "metrics", "logs"):
            problems.append(f"pipeline '{name}' has unknown signal type")
        pipeline = pipeline or {}
        if not isinstance(pipeline, dict):
            problems.append(f"pipeline '{name}' must be a mapping")
            continue

        for section in ("receivers", "exporters"):
            if not pipeline.get(section):
                problems.append(f"pipeline '{name}' has no {section}")

        for section in SECTIONS:
            components = pipeline.get(section) or []
            if not isinstance(components, list):
                problems.append(f"pipeline '{name}' {section} must be a list")
                continue
            for component in components:
                if not isinstance(component, str) or component not in defined[section]:
                    problems.append(
                        f"pipeline '{name}' references undefined {section[:-1]} '{component}'"
                    )

        processors = pipeline.get("processors") or []
        if not isinstance(processors, list):
            continue
        processors = [_component_type(str(p)) for p in processors]
        if "memory_limiter" in processors and processors[0] != "memory_limiter":
            problems.append(f"pipeline '{name}' must run memory_limiter first")

    return problems
