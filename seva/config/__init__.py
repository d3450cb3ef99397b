"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Also holds the closed vocabularies (roles, shifts, statuses, severities)
shared by every bounded context.
"""

from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="seva-plus", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/seva",
        description="Document store connection URL (async SQLAlchemy)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Identity Provider ==========
    identity_api_key: Optional[str] = Field(
        default=None,
        description="API key for the managed identity provider"
    )
    identity_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity toolkit REST base URL"
    )
    identity_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for identity provider calls",
        ge=0.1,
        le=60
    )

    # ========== Blob Storage ==========
    storage_bucket: Optional[str] = Field(default=None, description="Blob storage bucket name")
    storage_base_url: str = Field(
        default="https://firebasestorage.googleapis.com/v0/b",
        description="Blob storage REST base URL"
    )
    storage_token: Optional[str] = Field(default=None, description="Bearer token for blob uploads")

    # ========== Email Relay (public contact form) ==========
    email_relay_url: str = Field(
        default="https://api.emailjs.com/api/v1.0/email/send",
        description="Email relay endpoint for the contact form"
    )
    email_relay_service_id: Optional[str] = Field(default=None, description="Relay service ID")
    email_relay_template_id: Optional[str] = Field(default=None, description="Relay template ID")
    email_relay_public_key: Optional[str] = Field(default=None, description="Relay public key")
    email_relay_timeout_seconds: float = Field(default=5.0, ge=0.1, le=30)

    # ========== Workforce ==========
    default_country_code: str = Field(
        default="+91",
        description="Prefix applied to local 10-digit mobile numbers"
    )
    staff_page_size: int = Field(default=10, ge=1, le=200, description="Staff roster page size")
    live_snapshot_limit: int = Field(default=500, ge=1, le=5000, description="Max documents per live snapshot")
    bulk_upload_max_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum bulk upload file size in bytes",
        ge=1
    )

    # ========== Operations ==========
    qr_base_url: str = Field(default="https://seva.plus/qr", description="QR short-link base URL")

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # ========== Grafana OTLP Metrics ==========
    grafana_host: Optional[str] = Field(default=None, description="Grafana OTLP gateway URL")
    grafana_api_key: Optional[str] = Field(default=None, description="Grafana API key")
    grafana_instance_id: Optional[str] = Field(default=None, description="Grafana instance ID")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class StaffRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    STAFF = "staff"


class ShiftColor(str, Enum):
    """Red/orange/green roughly map to morning/afternoon/night."""
    RED = "red"
    ORANGE = "orange"
    GREEN = "green"


class CoverageStatus(str, Enum):
    ADEQUATE = "adequate"
    UNDERSTAFFED = "understaffed"
    OVERSTAFFED = "overstaffed"


class HeadcountSource(str, Enum):
    MANUAL = "manual"
    API = "api"
    ESTIMATED = "estimated"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DEACTIVATE = "deactivate"
    ACTIVATE = "activate"


class BulkUploadStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class FacilityType(str, Enum):
    TOILET = "toilet"
    BIN = "bin"
    WATER = "water"
    HELPDESK = "helpdesk"


class FacilityStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    FULL = "full"
    OUT_OF_ORDER = "out-of-order"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    VERIFIED = "verified"


class AssigneeType(str, Enum):
    STAFF = "staff"
    TEAM = "team"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueCategory(str, Enum):
    CLEANLINESS = "cleanliness"
    MAINTENANCE = "maintenance"
    SAFETY = "safety"
    ACCESSIBILITY = "accessibility"
    OTHER = "other"


class IssueStatus(str, Enum):
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SLAState(str, Enum):
    """Issue SLA states, evaluated at query time."""
    MET = "met"
    BREACHED = "breached"
    CRITICAL = "critical"
    ON_TRACK = "on-track"


class QRPlacementStatus(str, Enum):
    PRINTED = "printed"
    PLACED = "placed"
    VERIFIED = "verified"


class NotificationChannel(str, Enum):
    WHATSAPP = "whatsapp"
    SMS = "sms"
    EMAIL = "email"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"


class RecipientType(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"
    ZONE = "zone"


class AdType(str, Enum):
    ANNOUNCEMENT = "announcement"
    SPONSORED = "sponsored"
    EMERGENCY = "emergency"


class AdStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    EXPIRED = "expired"


class Collection(str, Enum):
    """Named collections exposed through the live change feed."""
    STAFF = "staff"
    TEAMS = "teams"
    FACILITIES = "facilities"
    TASKS = "tasks"
    ISSUES = "issues"
    SHIFTS = "shifts"
    HEADCOUNTS = "headcounts"
    NOTIFICATIONS = "notifications"
    ADS = "ads"
    STAFF_AUDIT = "staff-audit"
    QRCODES = "qrcodes"
    BULK_UPLOADS = "bulk-uploads"


# ========== Lists for validation ==========

VALID_ROLES = [r.value for r in StaffRole]
VALID_SHIFTS = [s.value for s in ShiftColor]
VALID_FACILITY_TYPES = [t.value for t in FacilityType]
VALID_FACILITY_STATUSES = [s.value for s in FacilityStatus]
VALID_TASK_STATUSES = [s.value for s in TaskStatus]
VALID_ISSUE_SEVERITIES = [s.value for s in IssueSeverity]
VALID_ISSUE_CATEGORIES = [c.value for c in IssueCategory]
VALID_ISSUE_STATUSES = [s.value for s in IssueStatus]
VALID_CHANNELS = [c.value for c in NotificationChannel]
VALID_COLLECTIONS = [c.value for c in Collection]

# Crowd members per staff member.
STAFFING_RATIO = 8
# |assigned - required| within this band counts as adequate.
COVERAGE_TOLERANCE = 2

ISSUE_SLA_MINUTES = {
    IssueSeverity.CRITICAL: 60,
    IssueSeverity.HIGH: 120,
    IssueSeverity.MEDIUM: 240,
    IssueSeverity.LOW: 480,
}
SLA_CRITICAL_WINDOW_MINUTES = 60
