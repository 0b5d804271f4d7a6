"""Donation Store — SQL implementation of DonationRepository.

Invariants:
    - Lifecycle writes go through conditional_update ONLY: one UPDATE ... WHERE
      statement carrying both the predicate and the patch
    - The row returned by conditional_update is re-selected inside the same
      transaction, before COMMIT, so it is the row this update wrote
    - create_many_available inserts every row in one transaction or none
    - Listing never returns rows with blank title/category or quantity <= 0

Design Decisions:
    - Core table statements (not ORM objects) for reads and updates: no identity
      map, so a session never serves a stale object after a concurrent write
    - WhenTrue renders as CASE WHEN <flag> IS true THEN <value> ELSE <column>;
      the database evaluates it against the row it holds under the write lock
    - No RETURNING: same statements on PostgreSQL and SQLite
"""

import logging
from enum import Enum
from typing import Any, Sequence

from sqlalchemy import and_, case, func, literal, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.core.donation_record import DonationSnapshot, NewDonation
from foodshare.core.domain_types import ActorId, DonationId, DonationStatus
from foodshare.core.repository_protocols import AppliedUpdate, DonationFilters
from foodshare.core.store_conditions import NOT_TRUE, Expected, Patch, WhenTrue
from foodshare.models.donation import Donation

logger = logging.getLogger(__name__)

_donations = Donation.__table__


def _plain(value: Any) -> Any:
    """Enum members bind as their stored string."""
    if isinstance(value, Enum):
        return value.value
    return value


def _predicate(column_name: str, expected: Any):
    column = _donations.c[column_name]
    if expected is NOT_TRUE:
        return or_(column.is_(None), column.is_(False))
    if expected is None:
        return column.is_(None)
    return column == _plain(expected)


def _assignment(column_name: str, value: Any):
    column = _donations.c[column_name]
    if isinstance(value, WhenTrue):
        return case(
            (_donations.c[value.flag].is_(True),
             literal(_plain(value.value), column.type)),
            else_=column,
        )
    return _plain(value)


def _new_row(donor_id: ActorId, donation: NewDonation) -> Donation:
    return Donation(
        donor_id=donor_id,
        title=donation.title,
        description=donation.description,
        category=donation.category,
        quantity=donation.quantity,
        weight=donation.weight,
        donation_reason=donation.donation_reason,
        contact_info=donation.contact_info,
        expiry_date=donation.expiry_date,
        pickup_address=donation.pickup_address,
        pickup_latitude=donation.pickup_latitude,
        pickup_longitude=donation.pickup_longitude,
        status=DonationStatus.AVAILABLE.value,
    )


def _listable():
    """Rows a listing may show: non-blank title/category, positive quantity."""
    return and_(
        func.trim(_donations.c.title) != "",
        func.trim(_donations.c.category) != "",
        _donations.c.quantity > 0,
    )


class SqlDonationRepository:
    """DonationRepository backed by one AsyncSession (one request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, donation_id: DonationId) -> DonationSnapshot | None:
        result = await self.db.execute(
            select(_donations).where(_donations.c.id == donation_id),
        )
        row = result.mappings().first()
        return DonationSnapshot.from_row(row) if row else None

    async def create_available(
        self, donor_id: ActorId, donation: NewDonation,
    ) -> DonationId:
        ids = await self.create_many_available(donor_id, [donation])
        return ids[0]

    async def create_many_available(
        self, donor_id: ActorId, donations: Sequence[NewDonation],
    ) -> list[DonationId]:
        rows = [_new_row(donor_id, donation) for donation in donations]
        try:
            self.db.add_all(rows)
            await self.db.flush()
            ids = [DonationId(row.id) for row in rows]
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.warning(
                "Donation insert rolled back",
                extra={"actor_id": donor_id, "count": len(rows)},
            )
            raise
        return ids

    async def conditional_update(
        self, donation_id: DonationId, expected: Expected, patch: Patch,
    ) -> AppliedUpdate:
        """Apply `patch` iff every `expected` predicate holds. Atomic."""
        stmt = (
            update(_donations)
            .where(_donations.c.id == donation_id)
            .where(*(_predicate(k, v) for k, v in expected.items()))
            .values({k: _assignment(k, v) for k, v in patch.items()})
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                return AppliedUpdate(count=0)
            written = await self.db.execute(
                select(_donations).where(_donations.c.id == donation_id),
            )
            row = written.mappings().one()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return AppliedUpdate(
            count=result.rowcount, snapshot=DonationSnapshot.from_row(row),
        )

    async def list_rows(
        self, filters: DonationFilters, limit: int,
    ) -> list[dict]:
        query = select(_donations).where(_listable())
        if filters.status:
            query = query.where(_donations.c.status == filters.status.lower())
        if filters.category:
            query = query.where(
                _donations.c.category == filters.category.strip().lower(),
            )
        if filters.reserved_by is not None:
            query = query.where(_donations.c.reserved_by == filters.reserved_by)
        query = query.order_by(
            _donations.c.created_at.desc(), _donations.c.id.desc(),
        ).limit(limit)
        result = await self.db.execute(query)
        return [dict(row) for row in result.mappings()]

    async def list_involving(self, actor_id: ActorId) -> list[dict]:
        """Donations the actor gave or received, tagged with donation_type."""
        query = (
            select(_donations)
            .where(_listable())
            .where(or_(
                _donations.c.donor_id == actor_id,
                _donations.c.reserved_by == actor_id,
            ))
            .order_by(_donations.c.created_at.desc(), _donations.c.id.desc())
        )
        result = await self.db.execute(query)
        rows = []
        for row in result.mappings():
            item = dict(row)
            item["donation_type"] = (
                "given" if item["donor_id"] == actor_id else "received"
            )
            rows.append(item)
        return rows
