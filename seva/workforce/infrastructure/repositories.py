"""
Workforce Infrastructure Repositories
=====================================

Concrete implementations of the workforce repository interfaces using
SQLAlchemy. Repositories flush but never commit; the request owns the
transaction.
"""

import datetime as dt
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from seva.config import AuditAction
from seva.infrastructure.database import parse_uuid, utcnow
from seva.workforce.application.services import (
    IBulkUploadRepository,
    IHeadcountRepository,
    IShiftRepository,
    IStaffAuditRepository,
    IStaffRepository,
    ITeamRepository,
)
from seva.workforce.infrastructure.models import (
    BulkUploadModel,
    HeadcountModel,
    ShiftModel,
    StaffAuditModel,
    StaffModel,
    TeamModel,
)


class SQLAlchemyStaffRepository(IStaffRepository):
    """SQLAlchemy implementation of staff repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, staff_id: str) -> Optional[StaffModel]:
        staff_uuid = parse_uuid(staff_id)
        if staff_uuid is None:
            return None
        return await self._session.get(StaffModel, staff_uuid)

    async def get_many(self, staff_ids: Sequence[str]) -> List[StaffModel]:
        uuids = [u for u in (parse_uuid(i) for i in staff_ids) if u is not None]
        if not uuids:
            return []
        result = await self._session.execute(select(StaffModel).where(StaffModel.id.in_(uuids)))
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> StaffModel:
        model = StaffModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def search(
        self,
        query: Optional[str] = None,
        role: Optional[str] = None,
        shift: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[StaffModel], int]:
        conditions = []
        if query:
            pattern = f"%{query.lower()}%"
            conditions.append(or_(
                func.lower(StaffModel.name).like(pattern),
                func.lower(func.coalesce(StaffModel.email, "")).like(pattern),
                StaffModel.phone.like(f"%{query}%"),
            ))
        if role:
            conditions.append(StaffModel.role == role)
        if shift:
            conditions.append(StaffModel.shift == shift)
        if is_active is not None:
            conditions.append(StaffModel.is_active == is_active)

        total = await self._session.scalar(
            select(func.count()).select_from(StaffModel).where(*conditions)
        )

        stmt = (
            select(StaffModel)
            .where(*conditions)
            .order_by(StaffModel.created_at.desc(), StaffModel.name)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), int(total or 0)

    async def list_by_zones(self, zones: Sequence[str], active_only: bool = True) -> List[StaffModel]:
        if not zones:
            return []
        stmt = select(StaffModel).where(StaffModel.zone.in_(list(zones)))
        if active_only:
            stmt = stmt.where(StaffModel.is_active.is_(True))
        result = await self._session.execute(stmt.order_by(StaffModel.name))
        return list(result.scalars().all())

    async def list_available(self, exclude_ids: Sequence[str]) -> List[StaffModel]:
        stmt = select(StaffModel).where(
            StaffModel.is_active.is_(True),
            StaffModel.on_duty.is_(False),
        )
        excluded = [u for u in (parse_uuid(i) for i in exclude_ids) if u is not None]
        if excluded:
            stmt = stmt.where(StaffModel.id.not_in(excluded))
        result = await self._session.execute(stmt.order_by(StaffModel.name))
        return list(result.scalars().all())


class SQLAlchemyStaffAuditRepository(IStaffAuditRepository):
    """SQLAlchemy implementation of the staff audit log."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, staff_id: str, action: AuditAction, changes: dict, performed_by: str) -> StaffAuditModel:
        model = StaffAuditModel(
            staff_id=parse_uuid(staff_id),
            action=AuditAction(action).value,
            changes=changes,
            performed_by=performed_by,
            timestamp=utcnow(),
        )
        self._session.add(model)
        await self._session.flush()
        return model

    async def list_for_staff(self, staff_id: str) -> List[StaffAuditModel]:
        staff_uuid = parse_uuid(staff_id)
        if staff_uuid is None:
            return []
        stmt = (
            select(StaffAuditModel)
            .where(StaffAuditModel.staff_id == staff_uuid)
            .order_by(StaffAuditModel.timestamp.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class SQLAlchemyTeamRepository(ITeamRepository):
    """SQLAlchemy implementation of team repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, team_id: str) -> Optional[TeamModel]:
        team_uuid = parse_uuid(team_id)
        if team_uuid is None:
            return None
        return await self._session.get(TeamModel, team_uuid)

    async def create(self, **fields: Any) -> TeamModel:
        model = TeamModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def list(self, include_inactive: bool = False) -> List[TeamModel]:
        stmt = select(TeamModel)
        if not include_inactive:
            stmt = stmt.where(TeamModel.is_active.is_(True))
        result = await self._session.execute(stmt.order_by(TeamModel.name))
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[TeamModel]:
        stmt = select(TeamModel).where(
            func.lower(TeamModel.name) == name.strip().lower(),
            TeamModel.is_active.is_(True),
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()


class SQLAlchemyShiftRepository(IShiftRepository):
    """SQLAlchemy implementation of shift repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, shift_id: str) -> Optional[ShiftModel]:
        shift_uuid = parse_uuid(shift_id)
        if shift_uuid is None:
            return None
        return await self._session.get(ShiftModel, shift_uuid)

    async def create(self, **fields: Any) -> ShiftModel:
        model = ShiftModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def list(self, zone: Optional[str] = None, on_date: Optional[dt.date] = None) -> List[ShiftModel]:
        stmt = select(ShiftModel)
        if zone:
            stmt = stmt.where(ShiftModel.zone == zone)
        if on_date:
            stmt = stmt.where(ShiftModel.date == on_date)
        result = await self._session.execute(
            stmt.order_by(ShiftModel.date, ShiftModel.start_time, ShiftModel.name)
        )
        return list(result.scalars().all())


class SQLAlchemyHeadcountRepository(IHeadcountRepository):
    """SQLAlchemy implementation of headcount repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, **fields: Any) -> HeadcountModel:
        model = HeadcountModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def latest(self, zone: str) -> Optional[HeadcountModel]:
        stmt = (
            select(HeadcountModel)
            .where(HeadcountModel.zone == zone)
            .order_by(HeadcountModel.timestamp.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def list(self, zone: Optional[str] = None, limit: int = 100) -> List[HeadcountModel]:
        stmt = select(HeadcountModel)
        if zone:
            stmt = stmt.where(HeadcountModel.zone == zone)
        result = await self._session.execute(stmt.order_by(HeadcountModel.timestamp.desc()).limit(limit))
        return list(result.scalars().all())


class SQLAlchemyBulkUploadRepository(IBulkUploadRepository):
    """SQLAlchemy implementation of bulk upload records."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, **fields: Any) -> BulkUploadModel:
        model = BulkUploadModel(**fields)
        self._session.add(model)
        await self._session.flush()
        return model

    async def get(self, upload_id: str) -> Optional[BulkUploadModel]:
        upload_uuid = parse_uuid(upload_id)
        if upload_uuid is None:
            return None
        return await self._session.get(BulkUploadModel, upload_uuid)

    async def list(self, limit: int = 50) -> List[BulkUploadModel]:
        stmt = select(BulkUploadModel).order_by(BulkUploadModel.created_at.desc()).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
