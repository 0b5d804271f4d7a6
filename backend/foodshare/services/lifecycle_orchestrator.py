"""Lifecycle Orchestrator — authorization + dispatch for every donation operation.

Invariants:
    - Capability check runs ONCE per request, here, before any component is called
    - Typed FoodShareErrors pass through unchanged
    - SQLAlchemy failures become DatabaseError; anything else is logged and
      collapsed to InternalError (no internal detail leaves this layer)
    - Listing normalizes every row and drops the unusable ones; a store failure
      during listing yields [] instead of an error

Design Decisions:
    - Components receive the already-resolved side/actor; they never re-derive
      relationship from ids
    - One orchestrator per request: it wraps the request's repository
"""

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError

from foodshare.core.capabilities import authorize, confirmation_side, relationship_to
from foodshare.core.donation_record import DonationSnapshot
from foodshare.core.domain_types import Actor, DonationId, Operation
from foodshare.core.errors import (
    DatabaseError, ErrorContext, FoodShareError, InternalError, NotFoundError,
)
from foodshare.core.normalize_donation import normalize_donation
from foodshare.core.repository_protocols import DonationFilters, DonationRepository
from foodshare.core.validate_input import validate_batch, validate_new_donation
from foodshare.core.verification_code import (
    CodeGenerator, generate_verification_code,
)
from foodshare.services.business_confirmation import BusinessConfirmationGate
from foodshare.services.mutual_confirmation import (
    ConfirmationOutcome, MutualConfirmationLedger,
)
from foodshare.services.reservation_coordinator import ReservationCoordinator

logger = logging.getLogger(__name__)


class LifecycleOrchestrator:
    """Entry point used by the donation routes."""

    def __init__(
        self,
        repo: DonationRepository,
        code_generator: CodeGenerator = generate_verification_code,
        list_limit: int = 50,
        batch_max: int = 20,
        rng: random.Random | None = None,
    ):
        self.repo = repo
        self.list_limit = list_limit
        self.batch_max = batch_max
        self.rng = rng or random.Random()
        self.reservations = ReservationCoordinator(repo, code_generator)
        self.business_gate = BusinessConfirmationGate(repo)
        self.ledger = MutualConfirmationLedger(repo)

    @asynccontextmanager
    async def _guarded(self, operation: str, actor: Actor | None, donation_id=None):
        """Map non-domain failures to typed errors."""
        context = ErrorContext(
            donation_id=donation_id,
            actor_id=actor.id if actor else None,
            operation=operation,
        )
        try:
            yield
        except FoodShareError:
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"Store failure during {operation}: {e}",
                extra={"donation_id": donation_id, "operation": operation},
            )
            raise DatabaseError(operation, context) from e
        except Exception as e:
            logger.error(
                f"Unexpected failure during {operation}: {e}",
                extra={"donation_id": donation_id, "operation": operation},
                exc_info=True,
            )
            raise InternalError(context) from e

    async def _require(
        self, donation_id: DonationId, operation: str,
    ) -> DonationSnapshot:
        snapshot = await self.repo.get(donation_id)
        if snapshot is None:
            raise NotFoundError(
                "Donation", str(donation_id),
                ErrorContext(donation_id=donation_id, operation=operation),
            )
        return snapshot

    # ─── Create ──────────────────────────────────────────────────

    async def create(
        self, actor: Actor, payload: Mapping[str, Any],
    ) -> tuple[DonationId, tuple[float, float]]:
        authorize(Operation.CREATE, actor)
        donation = validate_new_donation(payload)
        async with self._guarded(Operation.CREATE.value, actor):
            donation_id = await self.repo.create_available(actor.id, donation)
        logger.info(
            "Donation created",
            extra={
                "donation_id": donation_id, "actor_id": actor.id,
                "operation": Operation.CREATE.value,
            },
        )
        return donation_id, (donation.pickup_latitude, donation.pickup_longitude)

    async def create_batch(
        self, actor: Actor, payloads: Sequence[Mapping[str, Any]],
    ) -> list[DonationId]:
        """All-or-nothing: validation precedes the single insert transaction."""
        authorize(Operation.CREATE, actor)
        donations = validate_batch(payloads, self.batch_max)
        async with self._guarded(Operation.CREATE.value, actor):
            ids = await self.repo.create_many_available(actor.id, donations)
        logger.info(
            f"Batch of {len(ids)} donations created",
            extra={"actor_id": actor.id, "operation": Operation.CREATE.value},
        )
        return ids

    # ─── Read ────────────────────────────────────────────────────

    def _normalized(self, rows: Sequence[Mapping[str, Any]]) -> list[dict]:
        normalized = (normalize_donation(row, self.rng) for row in rows)
        return [item for item in normalized if item is not None]

    async def list_donations(self, filters: DonationFilters) -> list[dict]:
        try:
            rows = await self.repo.list_rows(filters, self.list_limit)
        except Exception as e:
            logger.error(
                f"Listing donations failed: {e}",
                extra={"operation": "list"}, exc_info=True,
            )
            return []
        return self._normalized(rows)

    async def list_mine(self, actor: Actor) -> list[dict]:
        try:
            rows = await self.repo.list_involving(actor.id)
        except Exception as e:
            logger.error(
                f"Listing donations for actor failed: {e}",
                extra={"actor_id": actor.id, "operation": "list_mine"},
                exc_info=True,
            )
            return []
        return self._normalized(rows)

    async def get(self, donation_id: DonationId) -> dict:
        async with self._guarded("get", None, donation_id):
            result = await self.repo.get(donation_id)
        item = normalize_donation(
            asdict(result) if result else None, self.rng,
        )
        if item is None:
            raise NotFoundError(
                "Donation", str(donation_id),
                ErrorContext(donation_id=donation_id, operation="get"),
            )
        return item

    # ─── Transitions ─────────────────────────────────────────────

    async def reserve(
        self,
        donation_id: DonationId,
        actor: Actor,
        pickup_time,
        pickup_person_name,
        pickup_person_id,
    ) -> DonationSnapshot:
        authorize(Operation.RESERVE, actor, donation_id=donation_id)
        async with self._guarded(Operation.RESERVE.value, actor, donation_id):
            await self._require(donation_id, Operation.RESERVE.value)
            return await self.reservations.reserve(
                donation_id, actor,
                pickup_time, pickup_person_name, pickup_person_id,
            )

    async def business_confirm(
        self, donation_id: DonationId, actor: Actor, accept: bool,
    ) -> DonationSnapshot:
        operation = Operation.BUSINESS_DECIDE
        async with self._guarded(operation.value, actor, donation_id):
            current = await self._require(donation_id, operation.value)
            authorize(
                operation, actor,
                relationship_to(actor, current.donor_id, current.reserved_by),
                donation_id,
            )
            return await self.business_gate.decide(donation_id, actor, accept)

    async def confirm(
        self, donation_id: DonationId, actor: Actor, verification_code,
    ) -> ConfirmationOutcome:
        operation = Operation.CONFIRM
        async with self._guarded(operation.value, actor, donation_id):
            current = await self._require(donation_id, operation.value)
            relationship = authorize(
                operation, actor,
                relationship_to(actor, current.donor_id, current.reserved_by),
                donation_id,
            )
            return await self.ledger.confirm(
                donation_id, actor.id, confirmation_side(relationship),
                verification_code, current,
            )
