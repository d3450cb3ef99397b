"""
Live Updates
============

WebSocket channel that mirrors a named collection.

On connect the client receives the whole current list; after every
committed write to that collection it receives the whole list again.
Clients replace their list on each message, nothing is merged.

Browsers cannot set headers on a WebSocket handshake, so the ID token is
passed as the `token` query parameter.

Close codes:
    4001 - token missing
    4002 - token rejected by the identity provider
    4004 - unknown collection
"""

import asyncio
import datetime as dt
from typing import Any, Awaitable, Callable, Dict, List

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import Collection, settings
from seva.core.exceptions import AuthenticationException, ExternalServiceException
from seva.identity.application import AuthService
from seva.infrastructure.database import get_session_context, utcnow
from seva.operations.application.dto import (
    FacilityResponse,
    IssueResponse,
    QRCodeResponse,
    TaskResponse,
)
from seva.operations.infrastructure.models import FacilityModel, IssueModel, QRCodeModel, TaskModel
from seva.outreach.application.dto import AdResponse, NotificationResponse
from seva.outreach.infrastructure.models import AdModel, NotificationModel
from seva.shared.infrastructure.logging import get_logger
from seva.workforce.application.dto import (
    BulkUploadResponse,
    HeadcountResponse,
    ShiftResponse,
    StaffAuditResponse,
    StaffResponse,
    TeamResponse,
)
from seva.workforce.infrastructure.models import (
    BulkUploadModel,
    HeadcountModel,
    ShiftModel,
    StaffAuditModel,
    StaffModel,
    TeamModel,
)

logger = get_logger(__name__)

router = APIRouter(tags=["Live"])

CLOSE_MISSING_TOKEN = 4001
CLOSE_INVALID_TOKEN = 4002
CLOSE_UNKNOWN_COLLECTION = 4004

SnapshotLoader = Callable[[AsyncSession, dt.datetime], Awaitable[List[Dict[str, Any]]]]


def _loader(model, order_by, to_response, *where) -> SnapshotLoader:
    async def load(session: AsyncSession, now: dt.datetime) -> List[Dict[str, Any]]:
        stmt = select(model).where(*where).order_by(*order_by).limit(settings.live_snapshot_limit)
        result = await session.execute(stmt)
        return [to_response(row, now).model_dump(mode="json") for row in result.scalars().all()]
    return load


def _validated(response_cls):
    return lambda row, now: response_cls.model_validate(row)


SNAPSHOTS: Dict[str, SnapshotLoader] = {
    Collection.STAFF.value: _loader(StaffModel, [StaffModel.name], _validated(StaffResponse)),
    Collection.TEAMS.value: _loader(TeamModel, [TeamModel.name], _validated(TeamResponse)),
    Collection.FACILITIES.value: _loader(
        FacilityModel, [FacilityModel.code], _validated(FacilityResponse),
        FacilityModel.is_deleted.is_(False)
    ),
    Collection.TASKS.value: _loader(TaskModel, [TaskModel.created_at.desc()], TaskResponse.from_model),
    Collection.ISSUES.value: _loader(IssueModel, [IssueModel.reported_at.desc()], IssueResponse.from_model),
    Collection.SHIFTS.value: _loader(
        ShiftModel, [ShiftModel.date, ShiftModel.start_time, ShiftModel.name], _validated(ShiftResponse)
    ),
    Collection.HEADCOUNTS.value: _loader(
        HeadcountModel, [HeadcountModel.timestamp.desc()], _validated(HeadcountResponse)
    ),
    Collection.NOTIFICATIONS.value: _loader(
        NotificationModel, [NotificationModel.created_at.desc()], _validated(NotificationResponse)
    ),
    Collection.ADS.value: _loader(AdModel, [AdModel.created_at.desc()], AdResponse.from_model),
    Collection.STAFF_AUDIT.value: _loader(
        StaffAuditModel, [StaffAuditModel.timestamp.desc()], _validated(StaffAuditResponse)
    ),
    Collection.QRCODES.value: _loader(QRCodeModel, [QRCodeModel.created_at.desc()], _validated(QRCodeResponse)),
    Collection.BULK_UPLOADS.value: _loader(
        BulkUploadModel, [BulkUploadModel.created_at.desc()], _validated(BulkUploadResponse)
    ),
}


async def load_snapshot(collection: str) -> List[Dict[str, Any]]:
    async with get_session_context() as session:
        return await SNAPSHOTS[collection](session, utcnow())


async def _send_snapshot(websocket: WebSocket, collection: str) -> None:
    items = await load_snapshot(collection)
    await websocket.send_json({"collection": collection, "items": items})


@router.websocket("/live/{collection}")
async def live_collection(websocket: WebSocket, collection: str) -> None:
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=CLOSE_MISSING_TOKEN)
        return

    try:
        auth_session = await AuthService(websocket.app.state.identity_provider).authenticate(token)
    except AuthenticationException as e:
        logger.info("Live connection rejected", extra={"collection": collection, "raw_error": e.raw_error})
        await websocket.close(code=CLOSE_INVALID_TOKEN)
        return
    except ExternalServiceException as e:
        logger.error("Live connection could not be verified", extra={"error": e.message})
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    if collection not in SNAPSHOTS:
        await websocket.close(code=CLOSE_UNKNOWN_COLLECTION)
        return

    await websocket.accept()
    feed = websocket.app.state.change_feed
    queue = feed.subscribe(collection)
    uid = auth_session.current_user().uid
    logger.info("Live connection opened", extra={"collection": collection, "uid": uid})

    receiver = asyncio.ensure_future(websocket.receive())
    changed = None
    try:
        await _send_snapshot(websocket, collection)
        while True:
            if changed is None:
                changed = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({receiver, changed}, return_when=asyncio.FIRST_COMPLETED)
            if receiver in done:
                # Client messages are ignored; only a disconnect matters.
                if receiver.result()["type"] == "websocket.disconnect":
                    break
                receiver = asyncio.ensure_future(websocket.receive())
            if changed in done:
                changed = None
                await _send_snapshot(websocket, collection)
    except WebSocketDisconnect:
        pass
    finally:
        receiver.cancel()
        if changed is not None:
            changed.cancel()
        feed.unsubscribe(collection, queue)
        logger.info("Live connection closed", extra={"collection": collection, "uid": uid})


live_router = router
