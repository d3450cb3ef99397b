"""
Workforce Application Services
==============================

Application services orchestrate staff, team, shift and headcount use cases
and coordinate with repositories.

All writes of one use case go through the same session, so the caller
commits them together (e.g. team membership is written to both the team
and the staff record, or not at all).
"""

import datetime as dt
import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from seva.config import (
    AuditAction,
    BulkUploadStatus,
    HeadcountSource,
    NotificationChannel,
    RecipientType,
    ShiftColor,
    settings,
)
from seva.core.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from seva.infrastructure.storage import IBlobStorage
from seva.shared.infrastructure.exports import to_csv
from seva.shared.infrastructure.logging import get_logger
from seva.workforce.application.dto import (
    HeadcountCreate,
    ShiftCreate,
    StaffCreate,
    StaffUpdate,
    TeamCreate,
    TeamStats,
    TeamUpdate,
)
from seva.workforce.domain import (
    Coverage,
    RowError,
    StaffingCalculator,
    normalize_phone,
    team_capacity_percent,
    validate_bulk_row,
    validate_staff_fields,
)

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IStaffRepository(ABC):
    """Interface for staff data access."""

    @abstractmethod
    async def get(self, staff_id: str) -> Optional[Any]:
        """Get staff member by id."""

    @abstractmethod
    async def get_many(self, staff_ids: Sequence[str]) -> List[Any]:
        """Get staff members by id, skipping unknown ids."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Create staff member."""

    @abstractmethod
    async def search(
        self,
        query: Optional[str] = None,
        role: Optional[str] = None,
        shift: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Any], int]:
        """Search name/email/phone with filters; returns (page, total)."""

    @abstractmethod
    async def list_by_zones(self, zones: Sequence[str], active_only: bool = True) -> List[Any]:
        """Staff whose zone is one of `zones`."""

    @abstractmethod
    async def list_available(self, exclude_ids: Sequence[str]) -> List[Any]:
        """Active, off-duty staff not in `exclude_ids`."""


class IStaffAuditRepository(ABC):
    """Interface for the append-only staff audit log."""

    @abstractmethod
    async def add(self, staff_id: str, action: AuditAction, changes: dict, performed_by: str) -> Any:
        """Append an audit record."""

    @abstractmethod
    async def list_for_staff(self, staff_id: str) -> List[Any]:
        """Audit records for one staff member, newest first."""


class ITeamRepository(ABC):
    """Interface for team data access."""

    @abstractmethod
    async def get(self, team_id: str) -> Optional[Any]:
        """Get team by id (including soft-deleted)."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Create team."""

    @abstractmethod
    async def list(self, include_inactive: bool = False) -> List[Any]:
        """List teams ordered by name."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Any]:
        """Active team by case-insensitive name."""


class IShiftRepository(ABC):
    """Interface for shift data access."""

    @abstractmethod
    async def get(self, shift_id: str) -> Optional[Any]:
        """Get shift by id."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Create shift."""

    @abstractmethod
    async def list(self, zone: Optional[str] = None, on_date: Optional[dt.date] = None) -> List[Any]:
        """List shifts, optionally for one zone and/or date."""


class IHeadcountRepository(ABC):
    """Interface for headcount data access."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Record a headcount."""

    @abstractmethod
    async def latest(self, zone: str) -> Optional[Any]:
        """Most recent headcount for a zone by timestamp."""

    @abstractmethod
    async def list(self, zone: Optional[str] = None, limit: int = 100) -> List[Any]:
        """Headcounts newest first."""


class IBulkUploadRepository(ABC):
    """Interface for bulk upload records."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Create upload record."""

    @abstractmethod
    async def get(self, upload_id: str) -> Optional[Any]:
        """Get upload record by id."""

    @abstractmethod
    async def list(self, limit: int = 50) -> List[Any]:
        """Upload records newest first."""


# ========== Collaborators from other modules ==========

class INotificationQueue(ABC):
    """Enqueues outbound messages (implemented by the outreach module)."""

    @abstractmethod
    async def enqueue(
        self,
        recipients: List[str],
        channel: NotificationChannel,
        message: str,
        created_by: str,
        recipient_type: RecipientType = RecipientType.INDIVIDUAL,
        recipient_ids: Optional[List[str]] = None,
        template_id: Optional[str] = None,
        scheduled_for: Optional[dt.datetime] = None,
    ) -> Any:
        """Create a pending notification record."""


class ITeamTaskCounter(ABC):
    """Counts open work assigned to a team (implemented by the operations module)."""

    @abstractmethod
    async def count_active_for_team(self, team_id: str) -> int:
        """Pending or in-progress tasks assigned to the team."""


# ========== Helpers ==========

# Columns an update may change but never clear.
_REQUIRED_STAFF_FIELDS = ("name", "phone", "role", "shift", "on_duty")
_REQUIRED_TEAM_FIELDS = ("zones",)


def _cleared_fields(fields: Dict[str, Any], required: Sequence[str]) -> Dict[str, str]:
    return {
        field: f"{field.replace('_', ' ').capitalize()} cannot be cleared"
        for field in required
        if field in fields and fields[field] is None
    }


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _dedupe(ids: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(str(i) for i in ids))


def _link_member(team: Any, staff: Any) -> None:
    team_id, staff_id = str(team.id), str(staff.id)
    if staff_id not in team.member_ids:
        team.member_ids = [*team.member_ids, staff_id]
    if team_id not in staff.team_ids:
        staff.team_ids = [*staff.team_ids, team_id]


def _unlink_member(team: Any, staff: Any) -> None:
    team_id, staff_id = str(team.id), str(staff.id)
    team.member_ids = [m for m in team.member_ids if m != staff_id]
    staff.team_ids = [t for t in staff.team_ids if t != team_id]


# ========== Application Services ==========

class StaffService:
    """
    Staff roster management.

    Every create/update/activate/deactivate appends a staff-audit record in
    the same transaction as the change itself.
    """

    EXPORT_COLUMNS = ["id", "name", "phone", "email", "role", "shift", "zone", "on_duty", "is_active", "created_at"]

    def __init__(
        self,
        staff_repository: IStaffRepository,
        audit_repository: IStaffAuditRepository,
        team_repository: ITeamRepository,
        notification_queue: Optional[INotificationQueue] = None
    ):
        self._staff_repo = staff_repository
        self._audit_repo = audit_repository
        self._team_repo = team_repository
        self._notifications = notification_queue

    async def get(self, staff_id: str) -> Any:
        staff = await self._staff_repo.get(staff_id)
        if staff is None:
            raise ResourceNotFoundException("Staff", staff_id)
        return staff

    async def _resolve_teams(self, team_ids: Sequence[str]) -> List[Any]:
        teams = []
        for team_id in _dedupe(team_ids):
            team = await self._team_repo.get(team_id)
            if team is None or not team.is_active:
                raise ValidationException("Unknown team", {"team_ids": f"Team '{team_id}' not found"})
            teams.append(team)
        return teams

    async def create(self, data: StaffCreate, actor: str) -> Any:
        phone = normalize_phone(data.phone)
        email = data.email.strip() if data.email and data.email.strip() else None
        errors = validate_staff_fields(
            name=data.name, phone=phone, email=email, role=data.role, shift=data.shift
        )
        if errors:
            raise ValidationException("Invalid staff details", errors)

        teams = await self._resolve_teams(data.team_ids)
        now = _now()
        staff = await self._staff_repo.create(
            name=data.name.strip(),
            phone=phone,
            email=email,
            role=data.role,
            shift=data.shift,
            zone=data.zone,
            address=data.address,
            team_ids=[],
            on_duty=data.on_duty,
            is_active=True,
            created_by=actor,
            created_at=now,
            updated_at=now,
            last_seen_at=now,
        )
        for team in teams:
            _link_member(team, staff)

        await self._audit_repo.add(
            str(staff.id),
            AuditAction.CREATE,
            {"name": staff.name, "phone": staff.phone, "role": staff.role},
            actor,
        )
        logger.info("Staff created", extra={"staff_id": str(staff.id), "role": staff.role})
        return staff

    async def update(self, staff_id: str, data: StaffUpdate, actor: str) -> Any:
        staff = await self.get(staff_id)
        fields = data.model_dump(exclude_unset=True)
        if "phone" in fields and fields["phone"] is not None:
            fields["phone"] = normalize_phone(fields["phone"])
        if "email" in fields:
            fields["email"] = (fields["email"] or "").strip() or None

        errors = validate_staff_fields(
            name=fields.get("name"),
            phone=fields.get("phone"),
            email=fields.get("email"),
            role=fields.get("role"),
            shift=fields.get("shift"),
            partial=True,
        )
        errors.update(_cleared_fields(fields, _REQUIRED_STAFF_FIELDS))
        if errors:
            raise ValidationException("Invalid staff details", errors)

        changes: Dict[str, Dict[str, Any]] = {}

        team_ids = fields.pop("team_ids", None)
        if team_ids is not None:
            wanted = await self._resolve_teams(team_ids)
            wanted_ids = {str(team.id) for team in wanted}
            before = list(staff.team_ids)
            for team_id in before:
                if team_id not in wanted_ids:
                    team = await self._team_repo.get(team_id)
                    if team is not None:
                        _unlink_member(team, staff)
            for team in wanted:
                _link_member(team, staff)
            if set(before) != wanted_ids:
                changes["team_ids"] = {"from": before, "to": list(staff.team_ids)}

        for field, value in fields.items():
            if field == "name" and value is not None:
                value = value.strip()
            current = getattr(staff, field)
            if current != value:
                changes[field] = {"from": current, "to": value}
                setattr(staff, field, value)

        if changes:
            staff.updated_at = _now()
            await self._audit_repo.add(str(staff.id), AuditAction.UPDATE, changes, actor)
            logger.info("Staff updated", extra={"staff_id": str(staff.id), "fields": sorted(changes)})
        return staff

    async def set_active(self, staff_id: str, active: bool, actor: str) -> Any:
        staff = await self.get(staff_id)
        if staff.is_active == active:
            return staff

        previous = staff.is_active
        staff.is_active = active
        if not active:
            staff.on_duty = False
        staff.updated_at = _now()
        await self._audit_repo.add(
            str(staff.id),
            AuditAction.ACTIVATE if active else AuditAction.DEACTIVATE,
            {"is_active": {"from": previous, "to": active}},
            actor,
        )
        logger.info(
            "Staff activated" if active else "Staff deactivated",
            extra={"staff_id": str(staff.id)}
        )
        return staff

    async def list_page(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        shift: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> Tuple[List[Any], int, int]:
        """
        One page of the roster.

        Returns:
            (items, total matches, number of pages)
        """
        page_size = page_size or settings.staff_page_size
        page = max(1, page)
        items, total = await self._staff_repo.search(
            query=(search or "").strip() or None,
            role=role,
            shift=shift,
            is_active=is_active,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        return items, total, max(1, math.ceil(total / page_size))

    async def audit_history(self, staff_id: str) -> List[Any]:
        await self.get(staff_id)
        return await self._audit_repo.list_for_staff(staff_id)

    async def notify(self, staff_id: str, message: str, actor: str) -> Any:
        staff = await self.get(staff_id)
        if not staff.is_active:
            raise ValidationException("Cannot notify an inactive staff member")
        if self._notifications is None:
            raise ValidationException("Notifications are not available")
        notification = await self._notifications.enqueue(
            recipients=[staff.phone],
            channel=NotificationChannel.SMS,
            message=message,
            created_by=actor,
            recipient_type=RecipientType.INDIVIDUAL,
            recipient_ids=[str(staff.id)],
        )
        logger.info("Staff notification queued", extra={"staff_id": str(staff.id)})
        return notification

    async def export_csv(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        shift: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> str:
        items, _ = await self._staff_repo.search(
            query=(search or "").strip() or None, role=role, shift=shift, is_active=is_active
        )
        rows = [{column: getattr(staff, column) for column in self.EXPORT_COLUMNS} for staff in items]
        return to_csv(self.EXPORT_COLUMNS, rows)


class BulkUploadService:
    """
    Imports staff from a spreadsheet.

    Rows are validated first; only rows without errors are imported. The raw
    file is kept in blob storage and the run is recorded as a bulk upload.
    """

    REQUIRED_FIELDS = ("name", "mobile", "role")
    OPTIONAL_FIELDS = ("email", "team_name", "shift", "address")
    ALLOWED_EXTENSIONS = (".csv", ".xlsx")
    ERROR_COLUMNS = ["row", "field", "error"]

    def __init__(
        self,
        staff_repository: IStaffRepository,
        audit_repository: IStaffAuditRepository,
        team_repository: ITeamRepository,
        upload_repository: IBulkUploadRepository,
        storage: IBlobStorage
    ):
        self._staff_repo = staff_repository
        self._audit_repo = audit_repository
        self._team_repo = team_repository
        self._upload_repo = upload_repository
        self._storage = storage

    @classmethod
    def check_file(cls, file_name: str, size: int) -> str:
        """Validate name and size; returns the lower-case extension."""
        extension = ""
        if "." in file_name:
            extension = file_name[file_name.rindex("."):].lower()
        if extension not in cls.ALLOWED_EXTENSIONS:
            raise ValidationException("Please upload a CSV or XLSX file", {"file": "Unsupported file type"})
        if size > settings.bulk_upload_max_bytes:
            limit_mb = settings.bulk_upload_max_bytes // (1024 * 1024)
            raise ValidationException(
                f"File size must be less than {limit_mb}MB", {"file": "File too large"}
            )
        return extension

    @classmethod
    def resolve_mapping(cls, headers: Sequence[str], mapping: Optional[Dict[str, str]]) -> Dict[str, str]:
        """
        Map target field -> source column.

        Explicit mappings win; unmapped fields fall back to a header with the
        same name (case-insensitive). Missing required fields are an error.
        """
        by_lower = {header.strip().lower(): header for header in headers}
        resolved: Dict[str, str] = {}
        for field in cls.REQUIRED_FIELDS + cls.OPTIONAL_FIELDS:
            source = (mapping or {}).get(field)
            if source:
                if source not in headers:
                    raise ValidationException(
                        "Column mapping refers to an unknown column",
                        {field: f"Column '{source}' not found"}
                    )
                resolved[field] = source
            elif field in by_lower:
                resolved[field] = by_lower[field]

        missing = [field for field in cls.REQUIRED_FIELDS if field not in resolved]
        if missing:
            raise ValidationException(
                f"Please map the following required fields: {', '.join(missing)}",
                {field: "Column not mapped" for field in missing}
            )
        return resolved

    async def validate_rows(
        self, rows: Sequence[Dict[str, str]], mapping: Dict[str, str]
    ) -> Tuple[List[Tuple[int, Dict[str, str], Any]], List[RowError]]:
        """
        Apply the mapping and validate every row.

        Returns:
            (valid rows as (row number, mapped values, team or None), errors)
        """
        valid: List[Tuple[int, Dict[str, str], Any]] = []
        errors: List[RowError] = []
        seen_phones: Dict[str, int] = {}

        for index, raw in enumerate(rows, start=1):
            row = {field: (raw.get(column) or "").strip() for field, column in mapping.items()}
            row_errors = validate_bulk_row(row, index)

            phone = normalize_phone(row.get("mobile"))
            if phone and not any(e.field == "mobile" for e in row_errors):
                if phone in seen_phones:
                    row_errors.append(RowError(
                        row=index, field="mobile",
                        error=f"Duplicate mobile number (same as row {seen_phones[phone]})"
                    ))
                else:
                    seen_phones[phone] = index

            team = None
            if row.get("team_name"):
                team = await self._team_repo.get_by_name(row["team_name"])
                if team is None:
                    row_errors.append(RowError(row=index, field="team_name", error="Unknown team"))

            if row_errors:
                errors.extend(row_errors)
            else:
                valid.append((index, row, team))
        return valid, errors

    async def import_rows(
        self,
        file_name: str,
        content: bytes,
        content_type: str,
        headers: Sequence[str],
        rows: Sequence[Dict[str, str]],
        column_mapping: Optional[Dict[str, str]],
        actor: str
    ) -> Any:
        if not rows:
            raise ValidationException("File must have at least a header row and one data row")

        mapping = self.resolve_mapping(headers, column_mapping)
        valid, errors = await self.validate_rows(rows, mapping)

        timestamp = int(_now().timestamp() * 1000)
        file_url = await self._storage.upload(
            f"bulk-uploads/{timestamp}-{file_name}", content, content_type
        )

        upload = await self._upload_repo.create(
            file_name=file_name,
            file_url=file_url,
            total_rows=len(rows),
            valid_rows=len(valid),
            error_rows=len({e.row for e in errors}),
            column_mapping=mapping,
            errors=[{"row": e.row, "field": e.field, "error": e.error} for e in errors],
            status=BulkUploadStatus.PROCESSING.value,
            created_by=actor,
            created_at=_now(),
        )

        for _, row, team in valid:
            now = _now()
            staff = await self._staff_repo.create(
                name=row["name"],
                phone=normalize_phone(row["mobile"]),
                email=row.get("email") or None,
                role=row["role"].lower(),
                shift=(row.get("shift") or ShiftColor.RED.value).lower(),
                address=row.get("address") or None,
                team_ids=[],
                on_duty=False,
                is_active=True,
                created_by=actor,
                created_at=now,
                updated_at=now,
                last_seen_at=now,
            )
            if team is not None:
                _link_member(team, staff)
            await self._audit_repo.add(
                str(staff.id),
                AuditAction.CREATE,
                {"name": staff.name, "phone": staff.phone, "role": staff.role, "bulk_upload_id": str(upload.id)},
                actor,
            )

        upload.success_count = len(valid)
        upload.status = (BulkUploadStatus.COMPLETED if valid else BulkUploadStatus.FAILED).value
        upload.processed_at = _now()

        logger.info(
            "Bulk upload processed",
            extra={
                "upload_id": str(upload.id),
                "total_rows": len(rows),
                "imported": len(valid),
                "error_rows": upload.error_rows,
            }
        )
        return upload

    async def get(self, upload_id: str) -> Any:
        upload = await self._upload_repo.get(upload_id)
        if upload is None:
            raise ResourceNotFoundException("BulkUpload", upload_id)
        return upload

    async def list(self) -> List[Any]:
        return await self._upload_repo.list()

    async def errors_csv(self, upload_id: str) -> str:
        upload = await self.get(upload_id)
        return to_csv(self.ERROR_COLUMNS, upload.errors)


class TeamService:
    """Team CRUD, membership and team-wide messaging."""

    def __init__(
        self,
        team_repository: ITeamRepository,
        staff_repository: IStaffRepository,
        task_counter: Optional[ITeamTaskCounter] = None,
        notification_queue: Optional[INotificationQueue] = None
    ):
        self._team_repo = team_repository
        self._staff_repo = staff_repository
        self._task_counter = task_counter
        self._notifications = notification_queue

    async def get(self, team_id: str, include_inactive: bool = False) -> Any:
        team = await self._team_repo.get(team_id)
        if team is None or (not team.is_active and not include_inactive):
            raise ResourceNotFoundException("Team", team_id)
        return team

    async def create(self, data: TeamCreate, actor: str) -> Any:
        name = data.name.strip()
        if not name:
            raise ValidationException("Team name is required", {"name": "Team name is required"})
        now = _now()
        team = await self._team_repo.create(
            name=name,
            description=data.description,
            leader_id=data.leader_id,
            member_ids=[],
            zones=list(data.zones),
            default_shift=data.default_shift,
            capacity=data.capacity,
            is_active=True,
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        logger.info("Team created", extra={"team_id": str(team.id)})
        return team

    async def update(self, team_id: str, data: TeamUpdate) -> Any:
        team = await self.get(team_id)
        fields = data.model_dump(exclude_unset=True)
        if "name" in fields:
            name = (fields["name"] or "").strip()
            if not name:
                raise ValidationException("Team name is required", {"name": "Team name is required"})
            fields["name"] = name
        if errors := _cleared_fields(fields, _REQUIRED_TEAM_FIELDS):
            raise ValidationException("Invalid team details", errors)
        for field, value in fields.items():
            setattr(team, field, value)
        team.updated_at = _now()
        return team

    async def delete(self, team_id: str) -> Any:
        """Soft delete: the team is hidden but memberships stay on record."""
        team = await self.get(team_id)
        team.is_active = False
        team.deleted_at = _now()
        logger.info("Team deleted", extra={"team_id": str(team.id)})
        return team

    async def list(self, include_inactive: bool = False) -> List[Any]:
        return await self._team_repo.list(include_inactive=include_inactive)

    async def add_member(self, team_id: str, staff_id: str) -> Any:
        team = await self.get(team_id)
        staff = await self._staff_repo.get(staff_id)
        if staff is None:
            raise ResourceNotFoundException("Staff", staff_id)
        if not staff.is_active:
            raise ValidationException("Cannot add an inactive staff member to a team")
        _link_member(team, staff)
        team.updated_at = _now()
        return team

    async def remove_member(self, team_id: str, staff_id: str) -> Any:
        team = await self.get(team_id)
        staff = await self._staff_repo.get(staff_id)
        if staff is not None:
            _unlink_member(team, staff)
        else:
            team.member_ids = [m for m in team.member_ids if m != staff_id]
        team.updated_at = _now()
        return team

    async def stats(self, team: Any) -> TeamStats:
        members = [m for m in await self._staff_repo.get_many(team.member_ids) if m.is_active]
        active_tasks = 0
        if self._task_counter is not None:
            active_tasks = await self._task_counter.count_active_for_team(str(team.id))
        return TeamStats(
            total_members=len(members),
            active_members=sum(1 for m in members if m.on_duty),
            active_tasks=active_tasks,
            coverage_percent=team_capacity_percent(len(members), team.capacity),
        )

    async def notify(self, team_id: str, message: str, channel: str, actor: str) -> Any:
        team = await self.get(team_id)
        members = [m for m in await self._staff_repo.get_many(team.member_ids) if m.is_active]
        recipients = _dedupe(m.phone for m in members if m.phone)
        if not recipients:
            raise ValidationException("Team has no active members to notify")
        if self._notifications is None:
            raise ValidationException("Notifications are not available")
        notification = await self._notifications.enqueue(
            recipients=recipients,
            channel=NotificationChannel(channel),
            message=f"[{team.name}] {message}",
            created_by=actor,
            recipient_type=RecipientType.TEAM,
            recipient_ids=[str(team.id)],
        )
        logger.info("Team notification queued", extra={"team_id": str(team.id), "recipients": len(recipients)})
        return notification


class ShiftService:
    """Shift creation and staff assignment."""

    def __init__(self, shift_repository: IShiftRepository, staff_repository: IStaffRepository):
        self._shift_repo = shift_repository
        self._staff_repo = staff_repository

    async def get(self, shift_id: str) -> Any:
        shift = await self._shift_repo.get(shift_id)
        if shift is None:
            raise ResourceNotFoundException("Shift", shift_id)
        return shift

    async def _check_staff(self, staff_ids: Sequence[str]) -> List[str]:
        ids = _dedupe(staff_ids)
        found = {str(s.id): s for s in await self._staff_repo.get_many(ids)}
        unknown = [i for i in ids if i not in found or not found[i].is_active]
        if unknown:
            raise ValidationException(
                "Only active staff can be assigned to a shift",
                {"staff_ids": f"Unknown or inactive: {', '.join(unknown)}"}
            )
        return ids

    async def create(self, data: ShiftCreate, actor: str) -> Any:
        assigned = await self._check_staff(data.assigned_staff_ids)
        shift = await self._shift_repo.create(
            zone=data.zone.strip(),
            name=data.name.strip(),
            color=data.color,
            start_time=data.start_time,
            end_time=data.end_time,
            date=data.date,
            assigned_staff_ids=assigned,
            required_staff=data.required_staff,
            created_by=actor,
            created_at=_now(),
        )
        logger.info("Shift created", extra={"shift_id": str(shift.id), "zone": shift.zone})
        return shift

    async def list(self, zone: Optional[str] = None, on_date: Optional[dt.date] = None) -> List[Any]:
        return await self._shift_repo.list(zone=zone, on_date=on_date)

    async def assign(self, shift_id: str, staff_ids: Sequence[str]) -> Any:
        shift = await self.get(shift_id)
        shift.assigned_staff_ids = await self._check_staff(staff_ids)
        return shift

    async def auto_assign(self, shift_id: str) -> Any:
        """
        Fill the shift up to its required staff.

        Candidates are active, off-duty staff not already on any shift for
        the same zone and date; staff from the shift's zone come first.
        Existing assignments are kept.
        """
        shift = await self.get(shift_id)
        shortfall = StaffingCalculator.shortfall(shift.required_staff, len(shift.assigned_staff_ids))
        if shortfall == 0:
            return shift

        busy: set = set()
        for other in await self._shift_repo.list(zone=shift.zone, on_date=shift.date):
            busy.update(other.assigned_staff_ids)

        candidates = await self._staff_repo.list_available(exclude_ids=sorted(busy))
        candidates.sort(key=lambda s: (s.zone != shift.zone, s.name.lower()))
        picked = [str(s.id) for s in candidates[:shortfall]]
        shift.assigned_staff_ids = [*shift.assigned_staff_ids, *picked]

        logger.info(
            "Shift auto-assigned",
            extra={"shift_id": str(shift.id), "requested": shortfall, "assigned": len(picked)}
        )
        return shift


class CoverageService:
    """Headcount recording and zone coverage."""

    def __init__(self, headcount_repository: IHeadcountRepository, shift_repository: IShiftRepository):
        self._headcount_repo = headcount_repository
        self._shift_repo = shift_repository

    async def record_headcount(self, data: HeadcountCreate, actor: str) -> Any:
        StaffingCalculator.required_staff(data.count)
        headcount = await self._headcount_repo.create(
            zone=data.zone.strip(),
            count=data.count,
            source=HeadcountSource(data.source).value,
            confidence=data.confidence,
            timestamp=_now(),
            recorded_by=actor,
        )
        logger.info("Headcount recorded", extra={"zone": headcount.zone, "count": headcount.count})
        return headcount

    async def list_headcounts(self, zone: Optional[str] = None) -> List[Any]:
        return await self._headcount_repo.list(zone=zone)

    async def coverage(self, zone: str, on_date: Optional[dt.date] = None) -> Tuple[Any, dt.date, Coverage]:
        """
        Coverage for a zone on a date (default: today, UTC).

        Returns:
            (latest headcount, date, Coverage)
        """
        on_date = on_date or _now().date()
        headcount = await self._headcount_repo.latest(zone)
        if headcount is None:
            raise ResourceNotFoundException("Headcount", zone, {"zone": zone})

        shifts = await self._shift_repo.list(zone=zone, on_date=on_date)
        assigned = StaffingCalculator.assigned_staff(s.assigned_staff_ids for s in shifts)
        required = StaffingCalculator.required_staff(headcount.count)
        return headcount, on_date, StaffingCalculator.coverage(required, assigned)
