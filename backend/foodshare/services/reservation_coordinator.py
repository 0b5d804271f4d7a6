"""Reservation Coordinator — available -> reserved, with pickup logistics and a code.

Invariants:
    - Logistics are validated before the store is touched
    - Exactly one conditional update per call; its predicate is status = available
    - N concurrent reserves on one donation: exactly one applies, the rest get Conflict
    - The verification code comes from the injected generator (never from the caller)

Design Decisions:
    - Role check lives in the orchestrator (capabilities.authorize), not here
    - Lost race (count == 0) re-reads to tell NotFound from Conflict
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from foodshare.core.donation_record import DonationSnapshot
from foodshare.core.domain_types import Actor, DonationId, Operation
from foodshare.core.enforce_transitions import check_reservable
from foodshare.core.errors import ConflictError, ErrorContext, NotFoundError
from foodshare.core.repository_protocols import DonationRepository
from foodshare.core.store_conditions import reserve_transition
from foodshare.core.validate_input import validate_pickup_logistics
from foodshare.core.verification_code import (
    CodeGenerator, generate_verification_code,
)

logger = logging.getLogger(__name__)


class ReservationCoordinator:
    """Owns the reserve transition."""

    def __init__(
        self,
        repo: DonationRepository,
        code_generator: CodeGenerator = generate_verification_code,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repo = repo
        self.code_generator = code_generator
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def reserve(
        self,
        donation_id: DonationId,
        actor: Actor,
        pickup_time,
        pickup_person_name,
        pickup_person_id,
    ) -> DonationSnapshot:
        logistics = validate_pickup_logistics(
            pickup_time, pickup_person_name, pickup_person_id,
        )
        transition = reserve_transition(
            actor.id,
            logistics.pickup_time,
            logistics.pickup_person_name,
            logistics.pickup_person_id,
            self.code_generator(),
            self.clock(),
        )
        result = await self.repo.conditional_update(
            donation_id, transition.expected, transition.patch,
        )
        if result.applied:
            logger.info(
                "Donation reserved",
                extra={
                    "donation_id": donation_id,
                    "actor_id": actor.id,
                    "operation": Operation.RESERVE.value,
                },
            )
            return result.snapshot

        current = await self.repo.get(donation_id)
        if current is None:
            raise NotFoundError(
                "Donation", str(donation_id),
                ErrorContext(donation_id=donation_id, operation="reserve"),
            )
        error = check_reservable(current) or ConflictError(
            "Donation is not available for reservation",
            "DONATION_NOT_AVAILABLE",
            ErrorContext(donation_id=donation_id, operation="reserve"),
        )
        logger.warning(
            "Reservation lost to current state",
            extra={
                "donation_id": donation_id,
                "actor_id": actor.id,
                "operation": Operation.RESERVE.value,
                "error_code": error.code,
            },
        )
        raise error
