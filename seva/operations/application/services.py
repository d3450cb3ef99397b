"""
Operations Application Services
===============================

Application services for facilities, tasks, issues and QR codes.

Follow-up writes (the task created when a facility goes into maintenance,
or when a critical issue is reported) go through the same session as the
triggering write, so both are committed together or not at all.
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from seva.config import (
    AssigneeType,
    FacilityStatus,
    IssueSeverity,
    IssueStatus,
    QRPlacementStatus,
    SLAState,
    TaskStatus,
    settings,
)
from seva.core.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from seva.core.transitions import ensure_transition
from seva.infrastructure.storage import IBlobStorage
from seva.operations.application.dto import (
    FacilityCreate,
    IssueCreate,
    IssueStatusUpdate,
    TaskCreate,
)
from seva.operations.domain import (
    FACILITY_TRANSITIONS,
    ISSUE_TRANSITIONS,
    TASK_TRANSITIONS,
    SLACalculator,
    TaskTemplate,
    facility_task_for,
    is_overdue,
    issue_task_for,
)
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

UNRESOLVED_ISSUE_STATUSES = (IssueStatus.OPEN, IssueStatus.ASSIGNED, IssueStatus.IN_PROGRESS)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IFacilityRepository(ABC):

    @abstractmethod
    async def get(self, facility_id: str) -> Optional[Any]:
        """Facility by id, including soft-deleted ones."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Any]:
        """Facility by code, compared case-insensitively."""

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        """Insert a facility. Raises ConflictException on a duplicate code."""

    @abstractmethod
    async def list(
        self,
        search: Optional[str] = None,
        facility_type: Optional[str] = None,
        zone: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[Any]:
        """Facilities that are not soft-deleted, ordered by code."""


class ITaskRepository(ABC):

    @abstractmethod
    async def get(self, task_id: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        zone: Optional[str] = None,
        facility_id: Optional[str] = None
    ) -> List[Any]:
        """Tasks newest first."""


class IIssueRepository(ABC):

    @abstractmethod
    async def get(self, issue_id: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        pass

    @abstractmethod
    async def list(
        self,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        zone: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None
    ) -> List[Any]:
        """Issues most recently reported first."""


class IQRCodeRepository(ABC):

    @abstractmethod
    async def get(self, qr_id: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def create(self, **fields: Any) -> Any:
        pass

    @abstractmethod
    async def latest_for_facility(self, facility_id: str) -> Optional[Any]:
        """Highest-version QR code generated for a facility."""

    @abstractmethod
    async def list(self, facility_id: Optional[str] = None) -> List[Any]:
        pass


class IQREventRepository(ABC):

    @abstractmethod
    async def add(self, qr_id: str, action: QRPlacementStatus, performed_by: str, details: dict) -> Any:
        pass

    @abstractmethod
    async def list_for_qr(self, qr_id: str) -> List[Any]:
        pass


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


async def _create_task_from_template(
    task_repo: ITaskRepository,
    template: TaskTemplate,
    zone: str,
    actor: str,
    facility_id: Optional[str] = None,
    issue_id: Optional[str] = None,
) -> Any:
    now = _now()
    return await task_repo.create(
        title=template.title,
        description=template.description,
        facility_id=facility_id,
        issue_id=issue_id,
        zone=zone,
        priority=template.priority.value,
        status=TaskStatus.PENDING.value,
        due_at=now + dt.timedelta(minutes=template.sla_minutes),
        sla_minutes=template.sla_minutes,
        photos_before=[],
        photos_after=[],
        created_by=actor,
        created_at=now,
        updated_at=now,
    )


# ========== Application Services ==========

class FacilityService:
    """
    Facility registry.

    Moving a facility into `maintenance` or `full` creates exactly one
    follow-up task in the same transaction.
    """

    def __init__(self, facility_repository: IFacilityRepository, task_repository: ITaskRepository):
        self._facility_repo = facility_repository
        self._task_repo = task_repository

    async def get(self, facility_id: str) -> Any:
        facility = await self._facility_repo.get(facility_id)
        if facility is None or facility.is_deleted:
            raise ResourceNotFoundException("Facility", facility_id)
        return facility

    async def create(self, data: FacilityCreate, actor: str) -> Any:
        code = data.code.strip()
        if not code:
            raise ValidationException("Facility code is required", {"code": "Facility code is required"})

        existing = await self._facility_repo.get_by_code(code)
        if existing is not None:
            raise ConflictException(
                f"Facility code '{code}' already exists",
                {"code": code, "existing_id": str(existing.id)}
            )

        now = _now()
        facility = await self._facility_repo.create(
            code=code,
            code_normalized=code.lower(),
            type=data.type,
            zone=data.zone.strip(),
            lat=data.lat,
            lng=data.lng,
            capacity=data.capacity,
            status=data.status,
            photos=[],
            is_deleted=False,
            created_by=actor,
            created_at=now,
            last_updated=now,
        )
        logger.info("Facility created", extra={"facility_id": str(facility.id), "code": code})
        return facility

    async def list(
        self,
        search: Optional[str] = None,
        facility_type: Optional[str] = None,
        zone: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[Any]:
        return await self._facility_repo.list(
            search=(search or "").strip() or None,
            facility_type=facility_type,
            zone=zone,
            status=status,
        )

    async def detail(self, facility_id: str) -> Tuple[Any, List[Any]]:
        """Facility with its tasks, newest first."""
        facility = await self.get(facility_id)
        tasks = await self._task_repo.list(facility_id=str(facility.id))
        return facility, tasks

    async def update_status(self, facility_id: str, status: str, actor: str) -> Tuple[Any, Optional[Any]]:
        """
        Change a facility's status.

        Returns:
            (facility, auto-created task or None)

        Raises:
            InvalidTransitionException: If the status is unchanged
        """
        facility = await self.get(facility_id)
        requested = ensure_transition(
            "Facility", FACILITY_TRANSITIONS, FacilityStatus(facility.status), FacilityStatus(status)
        )
        facility.status = requested.value
        facility.last_updated = _now()

        task = None
        template = facility_task_for(requested, facility.type, facility.code)
        if template is not None:
            task = await _create_task_from_template(
                self._task_repo, template, facility.zone, "system", facility_id=str(facility.id)
            )
            facility.assigned_task_id = str(task.id)
            logger.info(
                "Follow-up task created for facility",
                extra={"facility_id": str(facility.id), "task_id": str(task.id), "status": requested.value}
            )
        return facility, task

    async def delete(self, facility_id: str) -> Any:
        facility = await self.get(facility_id)
        facility.is_deleted = True
        facility.deleted_at = _now()
        logger.info("Facility soft-deleted", extra={"facility_id": str(facility.id)})
        return facility


class TaskService:
    """Task board: creation, filtering and forward-only status changes."""

    STATUS_TIMESTAMPS = {
        TaskStatus.IN_PROGRESS: "started_at",
        TaskStatus.COMPLETED: "completed_at",
        TaskStatus.VERIFIED: "verified_at",
    }

    def __init__(self, task_repository: ITaskRepository, facility_repository: IFacilityRepository):
        self._task_repo = task_repository
        self._facility_repo = facility_repository

    async def get(self, task_id: str) -> Any:
        task = await self._task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("Task", task_id)
        return task

    async def create(self, data: TaskCreate, actor: str) -> Any:
        if data.facility_id:
            facility = await self._facility_repo.get(data.facility_id)
            if facility is None or facility.is_deleted:
                raise ValidationException(
                    "Unknown facility", {"facility_id": f"Facility '{data.facility_id}' not found"}
                )

        now = _now()
        due_at = _as_utc(data.due_at) if data.due_at else now + dt.timedelta(minutes=data.sla_minutes)
        task = await self._task_repo.create(
            title=data.title.strip(),
            description=data.description,
            facility_id=data.facility_id,
            zone=data.zone.strip(),
            assignee_type=data.assigned_to.type if data.assigned_to else None,
            assignee_id=data.assigned_to.id if data.assigned_to else None,
            priority=data.priority,
            status=TaskStatus.PENDING.value,
            due_at=due_at,
            sla_minutes=data.sla_minutes,
            photos_before=[],
            photos_after=[],
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        logger.info("Task created", extra={"task_id": str(task.id), "priority": data.priority})
        return task

    async def list(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        zone: Optional[str] = None,
        facility_id: Optional[str] = None,
        overdue: Optional[bool] = None,
        now: Optional[dt.datetime] = None
    ) -> List[Any]:
        tasks = await self._task_repo.list(status=status, priority=priority, zone=zone, facility_id=facility_id)
        if overdue is None:
            return tasks
        now = now or _now()
        return [t for t in tasks if is_overdue(t.due_at, t.status, now) == overdue]

    async def advance(self, task_id: str, status: str) -> Any:
        """
        Move a task to its next status and stamp the transition time.

        Raises:
            InvalidTransitionException: For anything but the next step
        """
        task = await self.get(task_id)
        requested = ensure_transition("Task", TASK_TRANSITIONS, TaskStatus(task.status), TaskStatus(status))
        now = _now()
        task.status = requested.value
        task.updated_at = now
        setattr(task, self.STATUS_TIMESTAMPS[requested], now)
        logger.info("Task status changed", extra={"task_id": str(task.id), "status": requested.value})
        return task


class IssueService:
    """
    Issue reporting and triage.

    High and critical issues get a follow-up task, due when the issue's SLA
    runs out.
    """

    def __init__(self, issue_repository: IIssueRepository, task_repository: ITaskRepository):
        self._issue_repo = issue_repository
        self._task_repo = task_repository

    async def get(self, issue_id: str) -> Any:
        issue = await self._issue_repo.get(issue_id)
        if issue is None:
            raise ResourceNotFoundException("Issue", issue_id)
        return issue

    async def create(self, data: IssueCreate, actor: str) -> Tuple[Any, Optional[Any]]:
        """
        Report an issue.

        Returns:
            (issue, auto-created task or None)
        """
        reporter = data.reported_by
        now = _now()
        issue = await self._issue_repo.create(
            facility_id=data.facility_id or None,
            zone=data.zone.strip(),
            category=data.category,
            severity=data.severity,
            description=data.description,
            photos=[],
            reporter_anonymous=reporter.anonymous,
            reporter_name=None if reporter.anonymous else reporter.name,
            reporter_contact=None if reporter.anonymous else reporter.contact,
            status=IssueStatus.OPEN.value,
            reported_at=now,
            updated_at=now,
        )

        task = None
        template = issue_task_for(IssueSeverity(data.severity), data.category, data.description)
        if template is not None:
            task = await _create_task_from_template(
                self._task_repo,
                template,
                issue.zone,
                "system",
                facility_id=issue.facility_id,
                issue_id=str(issue.id),
            )
            issue.task_id = str(task.id)

        logger.info(
            "Issue reported",
            extra={"issue_id": str(issue.id), "severity": data.severity, "task_created": task is not None}
        )
        return issue, task

    async def list(
        self,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        zone: Optional[str] = None
    ) -> List[Any]:
        return await self._issue_repo.list(severity=severity, category=category, status=status, zone=zone)

    async def triage(self) -> Dict[str, List[Any]]:
        """Unresolved issues grouped by severity, most severe first."""
        issues = await self._issue_repo.list(statuses=[s.value for s in UNRESOLVED_ISSUE_STATUSES])
        groups: Dict[str, List[Any]] = {
            s.value: [] for s in (IssueSeverity.CRITICAL, IssueSeverity.HIGH, IssueSeverity.MEDIUM, IssueSeverity.LOW)
        }
        for issue in issues:
            groups[issue.severity].append(issue)
        return groups

    async def advance(self, issue_id: str, data: IssueStatusUpdate) -> Any:
        """
        Move an issue to its next status, optionally recording who owns it.

        Raises:
            InvalidTransitionException: For anything but the next step
        """
        issue = await self.get(issue_id)
        requested = ensure_transition(
            "Issue", ISSUE_TRANSITIONS, IssueStatus(issue.status), IssueStatus(data.status)
        )
        now = _now()
        issue.status = requested.value
        issue.updated_at = now
        if data.assigned_to is not None:
            issue.assignee_type = AssigneeType(data.assigned_to.type).value
            issue.assignee_id = data.assigned_to.id
        if requested is IssueStatus.RESOLVED:
            issue.resolved_at = now
        logger.info("Issue status changed", extra={"issue_id": str(issue.id), "status": requested.value})
        return issue

    async def sla_breaches(self, now: Optional[dt.datetime] = None) -> Dict[str, int]:
        """Count of breached unresolved issues per severity."""
        now = now or _now()
        counts = {s.value: 0 for s in IssueSeverity}
        issues = await self._issue_repo.list(statuses=[s.value for s in UNRESOLVED_ISSUE_STATUSES])
        for issue in issues:
            if SLACalculator.status(issue.severity, issue.reported_at, issue.status, now) is SLAState.BREACHED:
                counts[issue.severity] += 1
        return counts


class QRCodeService:
    """
    QR code generation and placement tracking.

    Every placement step appends a QR event record.
    """

    PLACEMENT_PHOTO_TYPES = ("image/jpeg", "image/png", "image/webp")

    def __init__(
        self,
        qr_repository: IQRCodeRepository,
        event_repository: IQREventRepository,
        facility_repository: IFacilityRepository,
        storage: Optional[IBlobStorage] = None
    ):
        self._qr_repo = qr_repository
        self._event_repo = event_repository
        self._facility_repo = facility_repository
        self._storage = storage

    async def get(self, qr_id: str) -> Any:
        qr = await self._qr_repo.get(qr_id)
        if qr is None:
            raise ResourceNotFoundException("QRCode", qr_id)
        return qr

    async def generate(self, facility_ids: Sequence[str], actor: str) -> List[Any]:
        """
        Generate a new QR code for each facility.

        The version is one more than the facility's previous code, which is
        deactivated. The facility points at the newest code.
        """
        facilities = []
        for facility_id in dict.fromkeys(facility_ids):
            facility = await self._facility_repo.get(facility_id)
            if facility is None or facility.is_deleted:
                raise ResourceNotFoundException("Facility", facility_id)
            facilities.append(facility)

        base_url = settings.qr_base_url.rstrip("/")
        generated = []
        for facility in facilities:
            previous = await self._qr_repo.latest_for_facility(str(facility.id))
            if previous is not None:
                previous.is_active = False
            now = _now()
            qr = await self._qr_repo.create(
                facility_id=str(facility.id),
                type="public",
                version=(previous.version + 1) if previous is not None else 1,
                short_url=f"{base_url}/{facility.code}",
                is_active=True,
                created_by=actor,
                created_at=now,
                updated_at=now,
            )
            facility.qr_id = str(qr.id)
            facility.last_updated = now
            generated.append(qr)

        logger.info("QR codes generated", extra={"count": len(generated)})
        return generated

    async def list(self, facility_id: Optional[str] = None) -> List[Any]:
        return await self._qr_repo.list(facility_id=facility_id)

    async def update_placement(
        self,
        qr_id: str,
        status: str,
        actor: str,
        photo: Optional[Tuple[str, bytes, str]] = None
    ) -> Any:
        """
        Record a placement step (printed, placed or verified).

        Args:
            photo: Optional (file name, content, content type); only
                accepted with `placed`
        """
        qr = await self.get(qr_id)
        step = QRPlacementStatus(status)
        now = _now()
        details: Dict[str, Any] = {"status": step.value}

        if photo is not None and step is not QRPlacementStatus.PLACED:
            raise ValidationException("A placement photo can only be attached when marking a QR code as placed")

        if step is QRPlacementStatus.PRINTED:
            qr.printed_by = actor
            qr.printed_at = now
        elif step is QRPlacementStatus.PLACED:
            qr.placed_by = actor
            qr.placed_at = now
            if photo is not None:
                file_name, content, content_type = photo
                if content_type not in self.PLACEMENT_PHOTO_TYPES:
                    raise ValidationException(
                        "Placement photo must be a JPEG, PNG or WebP image",
                        {"photo": f"Unsupported content type '{content_type}'"}
                    )
                if self._storage is None:
                    raise ValidationException("File storage is not available")
                path = f"qr-placements/{qr.id}-{int(now.timestamp() * 1000)}"
                qr.placement_photo_url = await self._storage.upload(path, content, content_type)
                details["photo_url"] = qr.placement_photo_url
                details["file_name"] = file_name
        else:
            qr.verified_by = actor
            qr.verified_at = now

        qr.placement_status = step.value
        qr.updated_at = now
        await self._event_repo.add(str(qr.id), step, actor, details)
        logger.info("QR placement updated", extra={"qr_id": str(qr.id), "status": step.value})
        return qr

    async def events(self, qr_id: str) -> List[Any]:
        await self.get(qr_id)
        return await self._event_repo.list_for_qr(qr_id)
