"""Capability Checks — who may drive which lifecycle operation.

Invariants:
    - Relationship is derived once from (actor, donor_id, reserved_by)
    - An actor who is both donor and reserver resolves to DONOR; the ledger
      then fills both sides in one write
    - authorize() raises AuthorizationError or returns the resolved relationship
    - Self-reservation is not rejected here (role check only)
"""

from foodshare.core.domain_types import (
    Actor, ActorId, ActorRole, ConfirmationSide, Operation, Relationship,
)
from foodshare.core.errors import AuthorizationError, ErrorContext


_DENIED_MESSAGES = {
    Operation.RESERVE: "Only organizations can reserve donations",
    Operation.BUSINESS_DECIDE: "Only the donor can confirm the pickup time",
    Operation.CONFIRM: "You are not allowed to confirm this donation",
}

_ALLOWED_RELATIONSHIPS = {
    Operation.BUSINESS_DECIDE: frozenset({Relationship.DONOR}),
    Operation.CONFIRM: frozenset({Relationship.DONOR, Relationship.RECIPIENT}),
}


def relationship_to(
    actor: Actor, donor_id: ActorId, reserved_by: ActorId | None,
) -> Relationship:
    if actor.id == donor_id:
        return Relationship.DONOR
    if reserved_by is not None and actor.id == reserved_by:
        return Relationship.RECIPIENT
    return Relationship.UNRELATED


def authorize(
    operation: Operation,
    actor: Actor,
    relationship: Relationship | None = None,
    donation_id: int | None = None,
) -> Relationship | None:
    """Check the actor's capability for one operation. Pure."""
    context = ErrorContext(
        donation_id=donation_id, actor_id=actor.id, operation=operation.value,
    )
    if operation is Operation.CREATE:
        # The donor of a new donation is the actor by construction
        return Relationship.DONOR
    if operation is Operation.RESERVE:
        if actor.role is not ActorRole.ORGANIZATION:
            raise AuthorizationError(_DENIED_MESSAGES[operation], context)
        return relationship
    if relationship not in _ALLOWED_RELATIONSHIPS[operation]:
        raise AuthorizationError(_DENIED_MESSAGES[operation], context)
    return relationship


def confirmation_side(relationship: Relationship) -> ConfirmationSide:
    """Map an authorized CONFIRM relationship to the ledger side it fills."""
    if relationship is Relationship.DONOR:
        return ConfirmationSide.DONOR
    if relationship is Relationship.RECIPIENT:
        return ConfirmationSide.RECIPIENT
    raise ValueError(f"No confirmation side for {relationship.value}")
