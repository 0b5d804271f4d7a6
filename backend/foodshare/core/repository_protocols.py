"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Lifecycle transitions reach the store ONLY through conditional_update
    - conditional_update applies predicate + patch as one atomic statement;
      count == 0 means "precondition no longer holds", never a generic error
    - AppliedUpdate.snapshot is the row as written by that same update

Design Decisions:
    - Protocol over ABC: structural subtyping, SQL and test stores need no common base
"""

from dataclasses import dataclass
from typing import Protocol, Sequence

from foodshare.core.donation_record import DonationSnapshot, NewDonation
from foodshare.core.domain_types import ActorId, DonationId
from foodshare.core.store_conditions import Expected, Patch


@dataclass(frozen=True)
class AppliedUpdate:
    count: int
    snapshot: DonationSnapshot | None = None

    @property
    def applied(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class DonationFilters:
    status: str | None = None
    category: str | None = None
    reserved_by: ActorId | None = None


class DonationRepository(Protocol):
    """Contract for donation persistence — implemented by shell."""
    async def get(self, donation_id: DonationId) -> DonationSnapshot | None: ...
    async def create_available(
        self, donor_id: ActorId, donation: NewDonation,
    ) -> DonationId: ...
    async def create_many_available(
        self, donor_id: ActorId, donations: Sequence[NewDonation],
    ) -> list[DonationId]: ...
    async def conditional_update(
        self, donation_id: DonationId, expected: Expected, patch: Patch,
    ) -> AppliedUpdate: ...
    async def list_rows(
        self, filters: DonationFilters, limit: int,
    ) -> list[dict]: ...
    async def list_involving(self, actor_id: ActorId) -> list[dict]: ...
