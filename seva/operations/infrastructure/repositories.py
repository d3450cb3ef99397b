"""
Operations Infrastructure Repositories
======================================

Concrete implementations of the operations repository interfaces using
SQLAlchemy.
"""

from typing import Any, List, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import AssigneeType, QRPlacementStatus, TaskStatus
from seva.core.exceptions import ConflictException
from seva.infrastructure.database import parse_uuid, utcnow
from seva.operations.application.services import (
    IFacilityRepository,
    IIssueRepository,
    IQRCodeRepository,
    IQREventRepository,
    ITaskRepository,
)
from seva.operations.infrastructure.models import (
    FacilityModel,
    IssueModel,
    QRCodeModel,
    QREventModel,
    TaskModel,
)
from seva.workforce.application.services import ITeamTaskCounter


class SQLAlchemyFacilityRepository(IFacilityRepository):
    """SQLAlchemy implementation of facility repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, facility_id: str) -> Optional[FacilityModel]:
        facility_uuid = parse_uuid(facility_id)
        if facility_uuid is None:
            return None
        return await self._session.get(FacilityModel, facility_uuid)

    async def get_by_code(self, code: str) -> Optional[FacilityModel]:
        stmt = select(FacilityModel).where(FacilityModel.code_normalized == code.strip().lower())
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def create(self, **fields: Any) -> FacilityModel:
        model = FacilityModel(**fields)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ConflictException(
                f"Facility code '{fields.get('code')}' already exists",
                {"code": fields.get("code")}
            ) from e
        return model

    async def list(
        self,
        search: Optional[str] = None,
        facility_type: Optional[str] = None,
        zone: Optional[str] = None,
        status: Optional[str] = None
    ) -> List[FacilityModel]:
        stmt = select(FacilityModel).where(FacilityModel.is_deleted.is_(False))
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                FacilityModel.code_normalized.like(pattern),
                func.lower(FacilityModel.type).like(pattern),
                func.lower(FacilityModel.zone).like(pattern),
            ))
        if facility_type:
            stmt = stmt.where(FacilityModel.type == facility_type)
        if zone:
            stmt = stmt.where(FacilityModel.zone == zone)
        if status:
            stmt = stmt.where(FacilityModel.status == status)
        result = await self._session.execute(stmt.order_by(FacilityModel.code))
        return list(result.scalars().all())


class SQLAlchemyTaskRepository(ITaskRepository, ITeamTaskCounter):
    """SQLAlchemy implementation of task repository."""

    ACTIVE_STATUSES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, task_id: str) -> Optional[TaskModel]:
        task_uuid = parse_uuid(task_id)
        if task_uuid is None:
            return None
        return await self._session.get(TaskModel, task_uuid)

    async def create(self, **fields: Any) -> TaskModel:
        model = TaskModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def list(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        zone: Optional[str] = None,
        facility_id: Optional[str] = None
    ) -> List[TaskModel]:
        stmt = select(TaskModel)
        if status:
            stmt = stmt.where(TaskModel.status == status)
        if priority:
            stmt = stmt.where(TaskModel.priority == priority)
        if zone:
            stmt = stmt.where(TaskModel.zone == zone)
        if facility_id:
            stmt = stmt.where(TaskModel.facility_id == facility_id)
        result = await self._session.execute(stmt.order_by(TaskModel.created_at.desc()))
        return list(result.scalars().all())

    async def count_active_for_team(self, team_id: str) -> int:
        stmt = select(func.count()).select_from(TaskModel).where(
            TaskModel.assignee_type == AssigneeType.TEAM.value,
            TaskModel.assignee_id == team_id,
            TaskModel.status.in_(self.ACTIVE_STATUSES),
        )
        return int(await self._session.scalar(stmt) or 0)


class SQLAlchemyIssueRepository(IIssueRepository):
    """SQLAlchemy implementation of issue repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, issue_id: str) -> Optional[IssueModel]:
        issue_uuid = parse_uuid(issue_id)
        if issue_uuid is None:
            return None
        return await self._session.get(IssueModel, issue_uuid)

    async def create(self, **fields: Any) -> IssueModel:
        model = IssueModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def list(
        self,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        zone: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None
    ) -> List[IssueModel]:
        stmt = select(IssueModel)
        if severity:
            stmt = stmt.where(IssueModel.severity == severity)
        if category:
            stmt = stmt.where(IssueModel.category == category)
        if status:
            stmt = stmt.where(IssueModel.status == status)
        if statuses:
            stmt = stmt.where(IssueModel.status.in_(list(statuses)))
        if zone:
            stmt = stmt.where(IssueModel.zone == zone)
        result = await self._session.execute(stmt.order_by(IssueModel.reported_at.desc()))
        return list(result.scalars().all())


class SQLAlchemyQRCodeRepository(IQRCodeRepository):
    """SQLAlchemy implementation of QR code repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, qr_id: str) -> Optional[QRCodeModel]:
        qr_uuid = parse_uuid(qr_id)
        if qr_uuid is None:
            return None
        return await self._session.get(QRCodeModel, qr_uuid)

    async def create(self, **fields: Any) -> QRCodeModel:
        model = QRCodeModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def latest_for_facility(self, facility_id: str) -> Optional[QRCodeModel]:
        stmt = (
            select(QRCodeModel)
            .where(QRCodeModel.facility_id == facility_id)
            .order_by(QRCodeModel.version.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def list(self, facility_id: Optional[str] = None) -> List[QRCodeModel]:
        stmt = select(QRCodeModel)
        if facility_id:
            stmt = stmt.where(QRCodeModel.facility_id == facility_id)
        result = await self._session.execute(stmt.order_by(QRCodeModel.created_at.desc()))
        return list(result.scalars().all())


class SQLAlchemyQREventRepository(IQREventRepository):
    """SQLAlchemy implementation of the QR placement history."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, qr_id: str, action: QRPlacementStatus, performed_by: str, details: dict) -> QREventModel:
        model = QREventModel(
            qr_id=qr_id,
            action=QRPlacementStatus(action).value,
            performed_by=performed_by,
            timestamp=utcnow(),
            details=details,
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def list_for_qr(self, qr_id: str) -> List[QREventModel]:
        stmt = (
            select(QREventModel)
            .where(QREventModel.qr_id == qr_id)
            .order_by(QREventModel.timestamp.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
