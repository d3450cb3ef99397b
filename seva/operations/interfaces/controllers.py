"""
Operations Controllers (API Routes)
===================================

FastAPI routes for facilities, tasks, issues and QR codes.
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import Collection
from seva.identity.domain import AuthUser
from seva.identity.interfaces.dependencies import require_user
from seva.infrastructure.database import get_session
from seva.infrastructure.storage import IBlobStorage
from seva.operations.application import (
    FacilityCreate,
    FacilityDetail,
    FacilityResponse,
    FacilityService,
    FacilityStatusUpdate,
    IssueCreate,
    IssueResponse,
    IssueService,
    IssueStatusUpdate,
    QRCodeResponse,
    QRCodeService,
    QREventResponse,
    QRGenerateRequest,
    TaskCreate,
    TaskResponse,
    TaskService,
    TaskStatusUpdate,
    TriageResponse,
)
from seva.operations.infrastructure import (
    SQLAlchemyFacilityRepository,
    SQLAlchemyIssueRepository,
    SQLAlchemyQRCodeRepository,
    SQLAlchemyQREventRepository,
    SQLAlchemyTaskRepository,
)
from seva.shared.api.dependencies import get_blob_storage, get_change_feed, get_metrics_exporter
from seva.shared.infrastructure.events import ChangeFeed
from seva.shared.infrastructure.grafana import GrafanaOTLPExporter
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Operations"], dependencies=[Depends(require_user)])


# ========== Example payloads for Swagger ==========

ISSUE_CREATE_EXAMPLE = {
    "facility_id": None,
    "zone": "North",
    "category": "cleanliness",
    "severity": "critical",
    "description": "Overflowing bins near ghat entrance 3",
    "reported_by": {"anonymous": False, "name": "Volunteer desk", "contact": "+919876543210"}
}


# ========== Dependencies ==========

def get_facility_service(session: AsyncSession = Depends(get_session)) -> FacilityService:
    return FacilityService(SQLAlchemyFacilityRepository(session), SQLAlchemyTaskRepository(session))


def get_task_service(session: AsyncSession = Depends(get_session)) -> TaskService:
    return TaskService(SQLAlchemyTaskRepository(session), SQLAlchemyFacilityRepository(session))


def get_issue_service(session: AsyncSession = Depends(get_session)) -> IssueService:
    return IssueService(SQLAlchemyIssueRepository(session), SQLAlchemyTaskRepository(session))


def get_qr_service(
    session: AsyncSession = Depends(get_session),
    storage: IBlobStorage = Depends(get_blob_storage),
) -> QRCodeService:
    return QRCodeService(
        SQLAlchemyQRCodeRepository(session),
        SQLAlchemyQREventRepository(session),
        SQLAlchemyFacilityRepository(session),
        storage,
    )


# ========== Facilities ==========

@router.get("/facilities", response_model=List[FacilityResponse], summary="Search facilities")
async def list_facilities(
    search: Optional[str] = Query(None, description="Matches code, type or zone"),
    type: Optional[str] = Query(None),
    zone: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    service: FacilityService = Depends(get_facility_service),
) -> List[FacilityResponse]:
    return [FacilityResponse.model_validate(f) for f in await service.list(search, type, zone, status)]


@router.post(
    "/facilities",
    response_model=FacilityResponse,
    status_code=201,
    summary="Register a facility",
    description="Facility codes are unique regardless of case; a duplicate returns 409."
)
async def create_facility(
    payload: FacilityCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: FacilityService = Depends(get_facility_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> FacilityResponse:
    facility = await service.create(payload, user.uid)
    await session.commit()
    feed.publish(Collection.FACILITIES.value)
    return FacilityResponse.model_validate(facility)


@router.get("/facilities/{facility_id}", response_model=FacilityDetail, summary="Facility with its tasks")
async def get_facility(
    facility_id: str,
    service: FacilityService = Depends(get_facility_service),
) -> FacilityDetail:
    facility, tasks = await service.detail(facility_id)
    detail = FacilityDetail.model_validate(facility)
    detail.tasks = [TaskResponse.from_model(t) for t in tasks]
    return detail


@router.patch(
    "/facilities/{facility_id}/status",
    response_model=FacilityResponse,
    summary="Change facility status",
    description="""
    Any status may change to any other status (409 when unchanged).

    Side effects:
    - **maintenance**: creates a "Maintenance Required" task, priority high, due in 60 minutes
    - **full**: creates an "Empty/Clean Required" task, priority medium, due in 120 minutes

    The status change and the follow-up task are committed together.
    `assigned_task_id` points at the new task.
    """
)
async def update_facility_status(
    facility_id: str,
    payload: FacilityStatusUpdate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: FacilityService = Depends(get_facility_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> FacilityResponse:
    facility, task = await service.update_status(facility_id, payload.status, user.uid)
    await session.commit()
    if task is not None:
        feed.publish(Collection.FACILITIES.value, Collection.TASKS.value)
    else:
        feed.publish(Collection.FACILITIES.value)
    return FacilityResponse.model_validate(facility)


@router.delete("/facilities/{facility_id}", response_model=FacilityResponse, summary="Soft-delete a facility")
async def delete_facility(
    facility_id: str,
    session: AsyncSession = Depends(get_session),
    service: FacilityService = Depends(get_facility_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> FacilityResponse:
    facility = await service.delete(facility_id)
    await session.commit()
    feed.publish(Collection.FACILITIES.value)
    return FacilityResponse.model_validate(facility)


# ========== Tasks ==========

@router.get("/tasks", response_model=List[TaskResponse], summary="Task board")
async def list_tasks(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    zone: Optional[str] = Query(None),
    facility_id: Optional[str] = Query(None),
    overdue: Optional[bool] = Query(None, description="Only overdue (true) or only on-time (false) tasks"),
    service: TaskService = Depends(get_task_service),
) -> List[TaskResponse]:
    tasks = await service.list(status, priority, zone, facility_id, overdue)
    return [TaskResponse.from_model(t) for t in tasks]


@router.post("/tasks", response_model=TaskResponse, status_code=201, summary="Create a task")
async def create_task(
    payload: TaskCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: TaskService = Depends(get_task_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TaskResponse:
    task = await service.create(payload, user.uid)
    await session.commit()
    feed.publish(Collection.TASKS.value)
    return TaskResponse.from_model(task)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)) -> TaskResponse:
    return TaskResponse.from_model(await service.get(task_id))


@router.patch(
    "/tasks/{task_id}/status",
    response_model=TaskResponse,
    summary="Advance a task",
    description="pending -> in-progress -> completed -> verified. Any other change returns 409."
)
async def update_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    session: AsyncSession = Depends(get_session),
    service: TaskService = Depends(get_task_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TaskResponse:
    task = await service.advance(task_id, payload.status)
    await session.commit()
    feed.publish(Collection.TASKS.value)
    return TaskResponse.from_model(task)


# ========== Issues ==========

@router.get("/issues", response_model=List[IssueResponse], summary="Issues with SLA status")
async def list_issues(
    severity: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    zone: Optional[str] = Query(None),
    service: IssueService = Depends(get_issue_service),
) -> List[IssueResponse]:
    return [IssueResponse.from_model(i) for i in await service.list(severity, category, status, zone)]


@router.post(
    "/issues",
    response_model=IssueResponse,
    status_code=201,
    summary="Report an issue",
    description=f"""
    High and critical issues also create a task in the same transaction:
    titled "<SEVERITY>: <category> issue", priority high for critical
    (medium for high), due when the SLA runs out (60 / 120 minutes).
    `task_id` links the issue to it.

    **Example Request**:
    ```json
    {json.dumps(ISSUE_CREATE_EXAMPLE, indent=4)}
    ```
    """
)
async def create_issue(
    payload: IssueCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: IssueService = Depends(get_issue_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> IssueResponse:
    issue, task = await service.create(payload, user.uid)
    await session.commit()
    if task is not None:
        feed.publish(Collection.ISSUES.value, Collection.TASKS.value)
    else:
        feed.publish(Collection.ISSUES.value)
    return IssueResponse.from_model(issue)


@router.get("/issues/triage", response_model=TriageResponse, summary="Unresolved issues by severity")
async def triage_issues(service: IssueService = Depends(get_issue_service)) -> TriageResponse:
    groups = await service.triage()
    return TriageResponse(
        **{severity: [IssueResponse.from_model(i) for i in issues] for severity, issues in groups.items()},
        counts={severity: len(issues) for severity, issues in groups.items()},
    )


@router.get(
    "/issues/sla-breaches",
    summary="Breached unresolved issues per severity",
    description="Counts are also pushed to Grafana when metrics export is configured."
)
async def sla_breaches(
    service: IssueService = Depends(get_issue_service),
    exporter: GrafanaOTLPExporter = Depends(get_metrics_exporter),
) -> dict:
    counts = await service.sla_breaches()
    await exporter.export_sla_breaches(counts)
    return {"breached": counts, "total": sum(counts.values())}


@router.get("/issues/{issue_id}", response_model=IssueResponse)
async def get_issue(issue_id: str, service: IssueService = Depends(get_issue_service)) -> IssueResponse:
    return IssueResponse.from_model(await service.get(issue_id))


@router.patch(
    "/issues/{issue_id}/status",
    response_model=IssueResponse,
    summary="Advance an issue",
    description="open -> assigned -> in-progress -> resolved -> closed. Resolving stamps `resolved_at`."
)
async def update_issue_status(
    issue_id: str,
    payload: IssueStatusUpdate,
    session: AsyncSession = Depends(get_session),
    service: IssueService = Depends(get_issue_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> IssueResponse:
    issue = await service.advance(issue_id, payload)
    await session.commit()
    feed.publish(Collection.ISSUES.value)
    return IssueResponse.from_model(issue)


# ========== QR codes ==========

@router.post(
    "/qrcodes",
    response_model=List[QRCodeResponse],
    status_code=201,
    summary="Generate QR codes for facilities"
)
async def generate_qrcodes(
    payload: QRGenerateRequest,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: QRCodeService = Depends(get_qr_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> List[QRCodeResponse]:
    codes = await service.generate(payload.facility_ids, user.uid)
    await session.commit()
    feed.publish(Collection.QRCODES.value, Collection.FACILITIES.value)
    return [QRCodeResponse.model_validate(qr) for qr in codes]


@router.get("/qrcodes", response_model=List[QRCodeResponse])
async def list_qrcodes(
    facility_id: Optional[str] = Query(None),
    service: QRCodeService = Depends(get_qr_service),
) -> List[QRCodeResponse]:
    return [QRCodeResponse.model_validate(qr) for qr in await service.list(facility_id)]


@router.get("/qrcodes/{qr_id}", response_model=QRCodeResponse)
async def get_qrcode(qr_id: str, service: QRCodeService = Depends(get_qr_service)) -> QRCodeResponse:
    return QRCodeResponse.model_validate(await service.get(qr_id))


@router.post(
    "/qrcodes/{qr_id}/placement",
    response_model=QRCodeResponse,
    summary="Record a placement step",
    description="""
    Multipart form: `status` is one of printed, placed, verified. A `photo`
    (JPEG/PNG/WebP) may accompany `placed`; it is stored in blob storage.
    Each step appends a QR event.
    """
)
async def update_qr_placement(
    qr_id: str,
    status: str = Form(..., pattern="^(printed|placed|verified)$"),
    photo: Optional[UploadFile] = File(None),
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: QRCodeService = Depends(get_qr_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> QRCodeResponse:
    photo_data = None
    if photo is not None and photo.filename:
        photo_data = (photo.filename, await photo.read(), photo.content_type or "application/octet-stream")
    qr = await service.update_placement(qr_id, status, user.uid, photo_data)
    await session.commit()
    feed.publish(Collection.QRCODES.value)
    return QRCodeResponse.model_validate(qr)


@router.get("/qrcodes/{qr_id}/events", response_model=List[QREventResponse], summary="Placement history")
async def qr_events(qr_id: str, service: QRCodeService = Depends(get_qr_service)) -> List[QREventResponse]:
    return [QREventResponse.model_validate(e) for e in await service.events(qr_id)]


operations_router = router
