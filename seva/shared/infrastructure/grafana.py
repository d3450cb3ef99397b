"""
Grafana OTLP Metrics Exporter
==============================

Pushes operational gauges to Grafana Cloud via OTLP.

Metrics exported:
- seva_coverage_required_staff: staff required in a zone (1 per 8 people)
- seva_coverage_assigned_staff: staff assigned across the zone's shifts
- seva_coverage_delta: assigned minus required
- seva_sla_breached_issues: open issues past their SLA deadline, per severity
"""

import base64
import time
from typing import Dict, List, Optional, Tuple

import httpx

from seva.config import settings
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# (metric name, unit, description, value, attributes)
Gauge = Tuple[str, str, str, int, Dict[str, str]]


class GrafanaOTLPExporter:
    """
    Export operational gauges to Grafana Cloud via OTLP HTTP endpoint.

    Uses OpenTelemetry Protocol (OTLP) format for metrics. When host,
    api key or instance id is missing the exporter stays disabled and every
    export call returns False without network traffic.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        api_key: Optional[str] = None,
        instance_id: Optional[str] = None,
        timeout: float = 10.0
    ):
        self._host = host or settings.grafana_host
        self._api_key = api_key or settings.grafana_api_key
        self._instance_id = instance_id or settings.grafana_instance_id
        self._timeout = timeout
        self._enabled = bool(self._host and self._api_key and self._instance_id)

        if self._enabled:
            auth_pair = f"{self._instance_id}:{self._api_key}"
            self._auth_encoded = base64.b64encode(auth_pair.encode()).decode()
            if "/otlp/v1/metrics" not in self._host:
                self._url = f"{self._host}/otlp/v1/metrics"
            else:
                self._url = self._host
            logger.info(
                "Grafana OTLP exporter initialized",
                extra={"host": self._host, "instance_id": self._instance_id}
            )
        else:
            logger.info(
                "Grafana OTLP exporter not configured - metrics will not be exported",
                extra={
                    "host_configured": bool(self._host),
                    "api_key_configured": bool(self._api_key),
                    "instance_id_configured": bool(self._instance_id)
                }
            )

    def is_enabled(self) -> bool:
        """Check if exporter is properly configured."""
        return self._enabled

    def build_payload(self, gauges: List[Gauge], timestamp_ns: Optional[int] = None) -> dict:
        """Build an OTLP resourceMetrics document holding one data point per gauge."""
        timestamp_ns = timestamp_ns or int(time.time() * 1_000_000_000)
        metrics = []
        for name, unit, description, value, attributes in gauges:
            data_point_attributes = [
                {"key": "service", "value": {"stringValue": settings.app_name}},
            ]
            for key, attr_value in attributes.items():
                data_point_attributes.append({
                    "key": key,
                    "value": {"stringValue": str(attr_value)}
                })
            metrics.append({
                "name": name,
                "unit": unit,
                "description": description,
                "gauge": {
                    "dataPoints": [
                        {
                            "asInt": int(value),
                            "timeUnixNano": timestamp_ns,
                            "attributes": data_point_attributes
                        }
                    ]
                }
            })

        return {
            "resourceMetrics": [
                {
                    "resource": {
                        "attributes": [
                            {"key": "service.name", "value": {"stringValue": settings.app_name}},
                            {"key": "service.version", "value": {"stringValue": settings.app_version}},
                            {"key": "deployment.environment", "value": {"stringValue": settings.environment}},
                        ]
                    },
                    "scopeMetrics": [{"metrics": metrics}]
                }
            ]
        }

    async def export_gauges(self, gauges: List[Gauge]) -> bool:
        """
        Push gauges to Grafana.

        Returns:
            True if export succeeded, False otherwise
        """
        if not self._enabled or not gauges:
            return False

        payload = self.build_payload(gauges)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Basic {self._auth_encoded}",
            "X-Grafana-Org-Id": str(self._instance_id)
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(
                "Error exporting metrics to Grafana",
                extra={"error": str(e), "metrics_count": len(gauges)}
            )
            return False

        if response.status_code in (200, 202):
            logger.debug(
                "Metrics exported to Grafana",
                extra={"metrics_count": len(gauges), "status_code": response.status_code}
            )
            return True

        logger.warning(
            "Failed to export metrics to Grafana",
            extra={
                "status_code": response.status_code,
                "response": response.text[:500],
                "url": self._url
            }
        )
        return False

    async def export_coverage(self, zone: str, required: int, assigned: int, delta: int) -> bool:
        attributes = {"zone": zone}
        return await self.export_gauges([
            ("seva_coverage_required_staff", "1", "Staff required in zone", required, attributes),
            ("seva_coverage_assigned_staff", "1", "Staff assigned in zone", assigned, attributes),
            ("seva_coverage_delta", "1", "Assigned minus required staff", delta, attributes),
        ])

    async def export_sla_breaches(self, breached_by_severity: Dict[str, int]) -> bool:
        return await self.export_gauges([
            (
                "seva_sla_breached_issues",
                "1",
                "Open issues past their SLA deadline",
                count,
                {"severity": severity},
            )
            for severity, count in breached_by_severity.items()
        ])


# Global exporter instance
_grafana_exporter: Optional[GrafanaOTLPExporter] = None


def get_grafana_exporter() -> GrafanaOTLPExporter:
    """Get or create global Grafana exporter instance."""
    global _grafana_exporter
    if _grafana_exporter is None:
        _grafana_exporter = GrafanaOTLPExporter()
    return _grafana_exporter
