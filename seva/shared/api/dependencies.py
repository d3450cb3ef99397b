"""
Shared API Dependencies
=======================

Accessors for the collaborators created in the application lifespan.
Tests replace them through `app.dependency_overrides`.
"""

from fastapi import Request

from seva.infrastructure.storage import IBlobStorage
from seva.shared.infrastructure.events import ChangeFeed
from seva.shared.infrastructure.grafana import GrafanaOTLPExporter
from seva.site.application.services import IContentStore, IEmailRelay


def get_change_feed(request: Request) -> ChangeFeed:
    return request.app.state.change_feed


def get_blob_storage(request: Request) -> IBlobStorage:
    return request.app.state.blob_storage


def get_metrics_exporter(request: Request) -> GrafanaOTLPExporter:
    return request.app.state.metrics_exporter


def get_email_relay(request: Request) -> IEmailRelay:
    return request.app.state.email_relay


def get_content_store(request: Request) -> IContentStore:
    return request.app.state.content_store
