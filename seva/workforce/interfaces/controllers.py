"""
Workforce Controllers (API Routes)
==================================

FastAPI routes for staff, bulk uploads, teams, shifts, headcounts and
coverage.

Controllers are thin - they delegate to application services, commit the
request's transaction and then signal the live change feed.
"""

import datetime as dt
import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import Collection, settings
from seva.core.exceptions import ValidationException
from seva.identity.domain import AuthUser
from seva.identity.interfaces.dependencies import require_user
from seva.infrastructure.database import get_session
from seva.infrastructure.storage import IBlobStorage
from seva.operations.infrastructure.repositories import SQLAlchemyTaskRepository
from seva.outreach.application.dto import NotificationResponse
from seva.outreach.infrastructure.repositories import SQLAlchemyNotificationRepository
from seva.shared.api.dependencies import get_blob_storage, get_change_feed, get_metrics_exporter
from seva.shared.infrastructure.events import ChangeFeed
from seva.shared.infrastructure.grafana import GrafanaOTLPExporter
from seva.shared.infrastructure.logging import get_context_logger, log_latency
from seva.workforce.application import (
    BulkUploadResponse,
    BulkUploadService,
    CoverageResponse,
    CoverageService,
    HeadcountCreate,
    HeadcountResponse,
    ShiftAssignRequest,
    ShiftCreate,
    ShiftResponse,
    ShiftService,
    StaffAuditResponse,
    StaffCreate,
    StaffNotifyRequest,
    StaffPage,
    StaffResponse,
    StaffService,
    StaffUpdate,
    TeamCreate,
    TeamMemberRequest,
    TeamNotifyRequest,
    TeamResponse,
    TeamService,
    TeamUpdate,
)
from seva.workforce.infrastructure import (
    SQLAlchemyBulkUploadRepository,
    SQLAlchemyHeadcountRepository,
    SQLAlchemyShiftRepository,
    SQLAlchemyStaffAuditRepository,
    SQLAlchemyStaffRepository,
    SQLAlchemyTeamRepository,
    read_spreadsheet,
)

router = APIRouter(tags=["Workforce"], dependencies=[Depends(require_user)])


# ========== Example payloads for Swagger ==========

STAFF_CREATE_EXAMPLE = {
    "name": "Ramesh Kumar",
    "phone": "9876543210",
    "email": "ramesh@example.com",
    "role": "staff",
    "shift": "red",
    "zone": "North"
}

COVERAGE_RESPONSE_EXAMPLE = {
    "zone": "North",
    "date": "2025-01-14",
    "headcount": 12000,
    "headcount_at": "2025-01-14T06:30:00Z",
    "required_staff": 1500,
    "assigned_staff": 1000,
    "delta": -500,
    "status": "understaffed"
}


# ========== Dependencies ==========

def get_staff_service(session: AsyncSession = Depends(get_session)) -> StaffService:
    return StaffService(
        SQLAlchemyStaffRepository(session),
        SQLAlchemyStaffAuditRepository(session),
        SQLAlchemyTeamRepository(session),
        SQLAlchemyNotificationRepository(session),
    )


def get_bulk_upload_service(
    session: AsyncSession = Depends(get_session),
    storage: IBlobStorage = Depends(get_blob_storage),
) -> BulkUploadService:
    return BulkUploadService(
        SQLAlchemyStaffRepository(session),
        SQLAlchemyStaffAuditRepository(session),
        SQLAlchemyTeamRepository(session),
        SQLAlchemyBulkUploadRepository(session),
        storage,
    )


def get_team_service(session: AsyncSession = Depends(get_session)) -> TeamService:
    return TeamService(
        SQLAlchemyTeamRepository(session),
        SQLAlchemyStaffRepository(session),
        SQLAlchemyTaskRepository(session),
        SQLAlchemyNotificationRepository(session),
    )


def get_shift_service(session: AsyncSession = Depends(get_session)) -> ShiftService:
    return ShiftService(SQLAlchemyShiftRepository(session), SQLAlchemyStaffRepository(session))


def get_coverage_service(session: AsyncSession = Depends(get_session)) -> CoverageService:
    return CoverageService(SQLAlchemyHeadcountRepository(session), SQLAlchemyShiftRepository(session))


def _csv_response(body: str, file_name: str) -> Response:
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'}
    )


# ========== Staff ==========

@router.get("/staff", response_model=StaffPage, summary="Search the staff roster")
async def list_staff(
    search: Optional[str] = Query(None, description="Matches name, email or phone"),
    role: Optional[str] = Query(None),
    shift: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=200),
    service: StaffService = Depends(get_staff_service),
) -> StaffPage:
    items, total, pages = await service.list_page(search, role, shift, is_active, page, page_size)
    return StaffPage(
        items=[StaffResponse.model_validate(s) for s in items],
        total=total,
        page=page,
        page_size=page_size or settings.staff_page_size,
        pages=pages,
    )


@router.post(
    "/staff",
    response_model=StaffResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a staff member",
    description=f"""
    Create a staff member and write a `create` audit record.

    **Validation (400 with per-field errors)**:
    - name: required, at least 2 characters
    - phone: E.164; a local 10-digit mobile gets the default country code
    - email: optional; `gmail.con` gets the hint "Did you mean gmail.com?"
    - role: admin, manager, supervisor, staff
    - shift: red, orange, green

    **Example Request**:
    ```json
    {json.dumps(STAFF_CREATE_EXAMPLE, indent=4)}
    ```
    """
)
async def create_staff(
    payload: StaffCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: StaffService = Depends(get_staff_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> StaffResponse:
    staff = await service.create(payload, user.uid)
    await session.commit()
    feed.publish(Collection.STAFF.value, Collection.STAFF_AUDIT.value, Collection.TEAMS.value)
    return StaffResponse.model_validate(staff)


@router.get("/staff/export.csv", summary="Download the roster as CSV")
async def export_staff(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    shift: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    service: StaffService = Depends(get_staff_service),
) -> Response:
    body = await service.export_csv(search, role, shift, is_active)
    return _csv_response(body, "staff.csv")


@router.post(
    "/staff/bulk-upload",
    response_model=BulkUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import staff from a CSV or XLSX file",
    description="""
    Upload a roster spreadsheet (max 10MB).

    Required columns: `name`, `mobile`, `role`. Optional: `email`,
    `team_name`, `shift`, `address`. Pass `column_mapping` as a JSON object
    (field -> column header) when the headers differ.

    Rows with errors are skipped and reported as `{row, field, error}`; all
    valid rows are imported. The original file is kept in blob storage.
    """
)
async def bulk_upload_staff(
    request: Request,
    file: UploadFile = File(...),
    column_mapping: Optional[str] = Form(None, description='JSON, e.g. {"mobile": "Phone No"}'),
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: BulkUploadService = Depends(get_bulk_upload_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> BulkUploadResponse:
    file_name = file.filename or "upload.csv"
    content = await file.read()
    service.check_file(file_name, len(content))

    mapping = None
    if column_mapping:
        try:
            mapping = json.loads(column_mapping)
        except ValueError as e:
            raise ValidationException("column_mapping must be a JSON object") from e
        if not isinstance(mapping, dict):
            raise ValidationException("column_mapping must be a JSON object")

    log = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    headers, rows = read_spreadsheet(file_name, content)
    with log_latency(log, "bulk_import", file_name=file_name, rows=len(rows)):
        upload = await service.import_rows(
            file_name=file_name,
            content=content,
            content_type=file.content_type or "application/octet-stream",
            headers=headers,
            rows=rows,
            column_mapping=mapping,
            actor=user.uid,
        )
        await session.commit()
    feed.publish(
        Collection.BULK_UPLOADS.value, Collection.STAFF.value,
        Collection.STAFF_AUDIT.value, Collection.TEAMS.value,
    )
    return BulkUploadResponse.model_validate(upload)


@router.get("/staff/bulk-uploads", response_model=List[BulkUploadResponse], summary="Recent imports")
async def list_bulk_uploads(
    service: BulkUploadService = Depends(get_bulk_upload_service),
) -> List[BulkUploadResponse]:
    return [BulkUploadResponse.model_validate(u) for u in await service.list()]


@router.get("/staff/bulk-uploads/{upload_id}", response_model=BulkUploadResponse)
async def get_bulk_upload(
    upload_id: str,
    service: BulkUploadService = Depends(get_bulk_upload_service),
) -> BulkUploadResponse:
    return BulkUploadResponse.model_validate(await service.get(upload_id))


@router.get("/staff/bulk-uploads/{upload_id}/errors.csv", summary="Download row errors as CSV")
async def bulk_upload_errors(
    upload_id: str,
    service: BulkUploadService = Depends(get_bulk_upload_service),
) -> Response:
    return _csv_response(await service.errors_csv(upload_id), "validation-errors.csv")


@router.get("/staff/{staff_id}", response_model=StaffResponse)
async def get_staff(staff_id: str, service: StaffService = Depends(get_staff_service)) -> StaffResponse:
    return StaffResponse.model_validate(await service.get(staff_id))


@router.patch("/staff/{staff_id}", response_model=StaffResponse, summary="Edit a staff member")
async def update_staff(
    staff_id: str,
    payload: StaffUpdate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: StaffService = Depends(get_staff_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> StaffResponse:
    staff = await service.update(staff_id, payload, user.uid)
    await session.commit()
    feed.publish(Collection.STAFF.value, Collection.STAFF_AUDIT.value, Collection.TEAMS.value)
    return StaffResponse.model_validate(staff)


async def _set_active(staff_id, active, user, session, service, feed) -> StaffResponse:
    staff = await service.set_active(staff_id, active, user.uid)
    await session.commit()
    feed.publish(Collection.STAFF.value, Collection.STAFF_AUDIT.value)
    return StaffResponse.model_validate(staff)


@router.post("/staff/{staff_id}/deactivate", response_model=StaffResponse, summary="Soft-deactivate")
async def deactivate_staff(
    staff_id: str,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: StaffService = Depends(get_staff_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> StaffResponse:
    return await _set_active(staff_id, False, user, session, service, feed)


@router.post("/staff/{staff_id}/activate", response_model=StaffResponse, summary="Reactivate")
async def activate_staff(
    staff_id: str,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: StaffService = Depends(get_staff_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> StaffResponse:
    return await _set_active(staff_id, True, user, session, service, feed)


@router.get("/staff/{staff_id}/audit", response_model=List[StaffAuditResponse], summary="Change history")
async def staff_audit(
    staff_id: str,
    service: StaffService = Depends(get_staff_service),
) -> List[StaffAuditResponse]:
    return [StaffAuditResponse.model_validate(a) for a in await service.audit_history(staff_id)]


@router.post(
    "/staff/{staff_id}/notify",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Queue an SMS to one staff member"
)
async def notify_staff(
    staff_id: str,
    payload: StaffNotifyRequest,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: StaffService = Depends(get_staff_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> NotificationResponse:
    notification = await service.notify(staff_id, payload.message, user.uid)
    await session.commit()
    feed.publish(Collection.NOTIFICATIONS.value)
    return NotificationResponse.model_validate(notification)


# ========== Teams ==========

async def _team_response(service: TeamService, team) -> TeamResponse:
    response = TeamResponse.model_validate(team)
    response.stats = await service.stats(team)
    return response


@router.get("/teams", response_model=List[TeamResponse], summary="Teams with stats")
async def list_teams(
    include_inactive: bool = Query(False),
    service: TeamService = Depends(get_team_service),
) -> List[TeamResponse]:
    return [await _team_response(service, team) for team in await service.list(include_inactive)]


@router.post("/teams", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    payload: TeamCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: TeamService = Depends(get_team_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TeamResponse:
    team = await service.create(payload, user.uid)
    await session.commit()
    feed.publish(Collection.TEAMS.value)
    return await _team_response(service, team)


@router.get("/teams/{team_id}", response_model=TeamResponse)
async def get_team(team_id: str, service: TeamService = Depends(get_team_service)) -> TeamResponse:
    return await _team_response(service, await service.get(team_id))


@router.patch("/teams/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: str,
    payload: TeamUpdate,
    session: AsyncSession = Depends(get_session),
    service: TeamService = Depends(get_team_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TeamResponse:
    team = await service.update(team_id, payload)
    await session.commit()
    feed.publish(Collection.TEAMS.value)
    return await _team_response(service, team)


@router.delete("/teams/{team_id}", response_model=TeamResponse, summary="Soft-delete a team")
async def delete_team(
    team_id: str,
    session: AsyncSession = Depends(get_session),
    service: TeamService = Depends(get_team_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TeamResponse:
    team = await service.delete(team_id)
    await session.commit()
    feed.publish(Collection.TEAMS.value)
    return TeamResponse.model_validate(team)


@router.post("/teams/{team_id}/members", response_model=TeamResponse, summary="Add a member")
async def add_team_member(
    team_id: str,
    payload: TeamMemberRequest,
    session: AsyncSession = Depends(get_session),
    service: TeamService = Depends(get_team_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TeamResponse:
    team = await service.add_member(team_id, payload.staff_id)
    await session.commit()
    feed.publish(Collection.TEAMS.value, Collection.STAFF.value)
    return await _team_response(service, team)


@router.delete("/teams/{team_id}/members/{staff_id}", response_model=TeamResponse, summary="Remove a member")
async def remove_team_member(
    team_id: str,
    staff_id: str,
    session: AsyncSession = Depends(get_session),
    service: TeamService = Depends(get_team_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> TeamResponse:
    team = await service.remove_member(team_id, staff_id)
    await session.commit()
    feed.publish(Collection.TEAMS.value, Collection.STAFF.value)
    return await _team_response(service, team)


@router.post(
    "/teams/{team_id}/notify",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Message every active team member"
)
async def notify_team(
    team_id: str,
    payload: TeamNotifyRequest,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: TeamService = Depends(get_team_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> NotificationResponse:
    notification = await service.notify(team_id, payload.message, payload.channel, user.uid)
    await session.commit()
    feed.publish(Collection.NOTIFICATIONS.value)
    return NotificationResponse.model_validate(notification)


# ========== Shifts ==========

@router.get("/shifts", response_model=List[ShiftResponse])
async def list_shifts(
    zone: Optional[str] = Query(None),
    date: Optional[dt.date] = Query(None),
    service: ShiftService = Depends(get_shift_service),
) -> List[ShiftResponse]:
    return [ShiftResponse.model_validate(s) for s in await service.list(zone, date)]


@router.post("/shifts", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
async def create_shift(
    payload: ShiftCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: ShiftService = Depends(get_shift_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> ShiftResponse:
    shift = await service.create(payload, user.uid)
    await session.commit()
    feed.publish(Collection.SHIFTS.value)
    return ShiftResponse.model_validate(shift)


@router.get("/shifts/{shift_id}", response_model=ShiftResponse)
async def get_shift(shift_id: str, service: ShiftService = Depends(get_shift_service)) -> ShiftResponse:
    return ShiftResponse.model_validate(await service.get(shift_id))


@router.put("/shifts/{shift_id}/assignments", response_model=ShiftResponse, summary="Replace assigned staff")
async def assign_shift(
    shift_id: str,
    payload: ShiftAssignRequest,
    session: AsyncSession = Depends(get_session),
    service: ShiftService = Depends(get_shift_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> ShiftResponse:
    shift = await service.assign(shift_id, payload.staff_ids)
    await session.commit()
    feed.publish(Collection.SHIFTS.value)
    return ShiftResponse.model_validate(shift)


@router.post(
    "/shifts/{shift_id}/auto-assign",
    response_model=ShiftResponse,
    summary="Fill the shift with available staff",
    description="""
    Appends active, off-duty staff who are not on another shift for the same
    zone and date, up to the shift's `required_staff`. Existing assignments
    are kept.
    """
)
async def auto_assign_shift(
    shift_id: str,
    session: AsyncSession = Depends(get_session),
    service: ShiftService = Depends(get_shift_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> ShiftResponse:
    shift = await service.auto_assign(shift_id)
    await session.commit()
    feed.publish(Collection.SHIFTS.value)
    return ShiftResponse.model_validate(shift)


# ========== Headcounts & Coverage ==========

@router.post("/headcounts", response_model=HeadcountResponse, status_code=status.HTTP_201_CREATED)
async def record_headcount(
    payload: HeadcountCreate,
    user: AuthUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    service: CoverageService = Depends(get_coverage_service),
    feed: ChangeFeed = Depends(get_change_feed),
) -> HeadcountResponse:
    headcount = await service.record_headcount(payload, user.uid)
    await session.commit()
    feed.publish(Collection.HEADCOUNTS.value)
    return HeadcountResponse.model_validate(headcount)


@router.get("/headcounts", response_model=List[HeadcountResponse])
async def list_headcounts(
    zone: Optional[str] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
) -> List[HeadcountResponse]:
    return [HeadcountResponse.model_validate(h) for h in await service.list_headcounts(zone)]


@router.get(
    "/coverage/{zone}",
    response_model=CoverageResponse,
    summary="Required vs assigned staff for a zone",
    description=f"""
    required = ceil(latest headcount / 8); assigned = staff across the
    zone's shifts on `date` (default today). `adequate` when
    |assigned - required| <= 2. 404 when the zone has no headcount.

    **Example Response**:
    ```json
    {json.dumps(COVERAGE_RESPONSE_EXAMPLE, indent=4)}
    ```
    """
)
async def zone_coverage(
    zone: str,
    date: Optional[dt.date] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
    exporter: GrafanaOTLPExporter = Depends(get_metrics_exporter),
) -> CoverageResponse:
    headcount, on_date, coverage = await service.coverage(zone, date)
    await exporter.export_coverage(zone, coverage.required, coverage.assigned, coverage.delta)
    return CoverageResponse(
        zone=zone,
        date=on_date,
        headcount=headcount.count,
        headcount_at=headcount.timestamp,
        required_staff=coverage.required,
        assigned_staff=coverage.assigned,
        delta=coverage.delta,
        status=coverage.status.value,
    )


workforce_router = router
