"""Business Confirmation Gate — donor accepts or rejects a proposed pickup.

Invariants:
    - Only reserved donations with business_confirmed = false are decidable
    - accept sets business_confirmed = true exactly once (double-accept is a Conflict)
    - reject restores the pristine available shape: every reservation and
      confirmation column back to NULL, code included
    - donor_id is part of the update predicate as well as the orchestrator check

Design Decisions:
    - accept/reject share one predicate so a concurrent accept and reject
      cannot both apply
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from foodshare.core.donation_record import DonationSnapshot
from foodshare.core.domain_types import Actor, DonationId, Operation
from foodshare.core.enforce_transitions import check_business_decidable
from foodshare.core.errors import ConflictError, ErrorContext, NotFoundError
from foodshare.core.repository_protocols import DonationRepository
from foodshare.core.store_conditions import accept_transition, reject_transition

logger = logging.getLogger(__name__)


class BusinessConfirmationGate:
    """Owns the accept/reject decision on a reservation."""

    def __init__(
        self,
        repo: DonationRepository,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repo = repo
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def decide(
        self, donation_id: DonationId, actor: Actor, accept: bool,
    ) -> DonationSnapshot:
        build = accept_transition if accept else reject_transition
        transition = build(actor.id, self.clock())
        result = await self.repo.conditional_update(
            donation_id, transition.expected, transition.patch,
        )
        log_extra = {
            "donation_id": donation_id,
            "actor_id": actor.id,
            "operation": Operation.BUSINESS_DECIDE.value,
        }
        if result.applied:
            logger.info(
                "Pickup accepted" if accept else "Reservation rejected",
                extra=log_extra,
            )
            return result.snapshot

        context = ErrorContext(
            donation_id=donation_id, actor_id=actor.id,
            operation=Operation.BUSINESS_DECIDE.value,
        )
        current = await self.repo.get(donation_id)
        if current is None:
            raise NotFoundError("Donation", str(donation_id), context)
        error = check_business_decidable(current) or ConflictError(
            "Reservation changed, try again", "STATE_CONFLICT", context,
        )
        logger.warning(
            "Business decision lost to current state",
            extra={**log_extra, "error_code": error.code},
        )
        raise error
