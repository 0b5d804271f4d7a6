"""Mutual Confirmation Ledger — two independent acknowledgements complete a donation.

Invariants:
    - A side may confirm only a reserved, business-accepted donation, with the
      exact verification code, and only once
    - Promotion to completed happens in the SAME statement that records the second
      side: the store decides it from the row it holds (WhenTrue)
    - Concurrent donor + recipient confirms: both flags recorded, exactly one of the
      two calls observes the completion
    - Wrong code fails identically for both sides
    - A donor who reserved their own donation fills both sides in one confirm

Design Decisions:
    - `completed` is read back from the row written by this update, never inferred
      from a snapshot taken before the write
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from foodshare.core.donation_record import DonationSnapshot
from foodshare.core.domain_types import (
    ActorId, ConfirmationSide, DonationId, DonationStatus, Operation,
)
from foodshare.core.enforce_transitions import check_confirmable
from foodshare.core.errors import ConflictError, ErrorContext, NotFoundError
from foodshare.core.repository_protocols import DonationRepository
from foodshare.core.store_conditions import (
    confirm_transition, self_confirm_transition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationOutcome:
    side: ConfirmationSide
    completed: bool
    snapshot: DonationSnapshot


class MutualConfirmationLedger:
    """Owns the per-side confirmation and the completion promotion."""

    def __init__(
        self,
        repo: DonationRepository,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repo = repo
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def confirm(
        self,
        donation_id: DonationId,
        actor_id: ActorId,
        side: ConfirmationSide,
        code,
        current: DonationSnapshot | None = None,
    ) -> ConfirmationOutcome:
        """Record `side`'s confirmation. `current` enables a pre-write diagnosis."""
        code = str(code or "").strip()
        self_reserved = False
        if current is not None:
            error = check_confirmable(current, side, code)
            if error:
                raise error
            self_reserved = current.donor_id == current.reserved_by == actor_id

        if self_reserved:
            transition = self_confirm_transition(actor_id, code, self.clock())
        else:
            transition = confirm_transition(side, actor_id, code, self.clock())
        result = await self.repo.conditional_update(
            donation_id, transition.expected, transition.patch,
        )
        log_extra = {
            "donation_id": donation_id,
            "operation": Operation.CONFIRM.value,
        }
        if result.applied:
            completed = result.snapshot.status is DonationStatus.COMPLETED
            logger.info(
                "Donation completed" if completed
                else f"{side.value.capitalize()} confirmation registered",
                extra=log_extra,
            )
            return ConfirmationOutcome(side, completed, result.snapshot)

        context = ErrorContext(
            donation_id=donation_id, operation=Operation.CONFIRM.value,
        )
        latest = await self.repo.get(donation_id)
        if latest is None:
            raise NotFoundError("Donation", str(donation_id), context)
        error = check_confirmable(latest, side, code) or ConflictError(
            "Donation changed, try again", "STATE_CONFLICT", context,
        )
        logger.warning(
            "Confirmation lost to current state",
            extra={**log_extra, "error_code": error.code},
        )
        raise error
