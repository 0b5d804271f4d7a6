"""Donation Routes — HTTP surface of the donation lifecycle.

Invariants:
    - Every endpoint requires a bearer-authenticated Actor
    - Routes translate HTTP <-> orchestrator calls only; no lifecycle rule lives here
    - /my is declared before /{donation_id}

Design Decisions:
    - Listing endpoints return plain normalized dicts (shape owned by
      core/normalize_donation.py), transitions return typed response models
"""

from fastapi import APIRouter, Depends, Query, status

from foodshare.api.auth import get_current_actor
from foodshare.api.dependencies import get_orchestrator
from foodshare.core import lifecycle_messages as messages
from foodshare.core.domain_types import Actor, ConfirmationSide, DonationId
from foodshare.core.repository_protocols import DonationFilters
from foodshare.schemas.donation import (
    BusinessDecision,
    BusinessDecisionResponse,
    ConfirmationRequest,
    ConfirmationResponse,
    Coordinates,
    DonationBatchCreate,
    DonationBatchCreated,
    DonationCreate,
    DonationCreated,
    ReservationRequest,
    ReservationResponse,
)
from foodshare.services.lifecycle_orchestrator import LifecycleOrchestrator

router = APIRouter(prefix="/api/v1/donations", tags=["donations"])


@router.post(
    "", response_model=DonationCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_donation(
    body: DonationCreate,
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Offer one donation; the caller becomes its donor."""
    donation_id, (lat, lng) = await orchestrator.create(
        actor, body.model_dump(exclude_none=True),
    )
    return DonationCreated(
        message=messages.DONATION_CREATED,
        donation_id=donation_id,
        coordinates=Coordinates(latitude=lat, longitude=lng),
    )


@router.post(
    "/batch", response_model=DonationBatchCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_donation_batch(
    body: DonationBatchCreate,
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Offer several donations at once. All are created or none."""
    ids = await orchestrator.create_batch(
        actor, [item.model_dump(exclude_none=True) for item in body.donations],
    )
    return DonationBatchCreated(
        message=messages.batch_created(len(ids)),
        donation_ids=ids,
        count=len(ids),
    )


@router.get("")
async def list_donations(
    status_filter: str | None = Query(None, alias="status"),
    category: str | None = Query(None),
    reserved_by: int | None = Query(None),
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Newest donations first, normalized for display."""
    return await orchestrator.list_donations(
        DonationFilters(
            status=status_filter, category=category, reserved_by=reserved_by,
        ),
    )


@router.get("/my")
async def list_my_donations(
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Donations the caller gave or received."""
    return await orchestrator.list_mine(actor)


@router.get("/{donation_id}")
async def get_donation(
    donation_id: int,
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.get(DonationId(donation_id))


@router.post("/{donation_id}/reserve", response_model=ReservationResponse)
async def reserve_donation(
    donation_id: int,
    body: ReservationRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Organization proposes pickup logistics and receives the verification code."""
    snapshot = await orchestrator.reserve(
        DonationId(donation_id), actor,
        body.pickup_time, body.pickup_person_name, body.pickup_person_id,
    )
    return ReservationResponse(
        message=messages.RESERVATION_PENDING,
        verification_code=snapshot.verification_code,
        pickup_time=snapshot.pickup_time,
        pickup_person_name=snapshot.pickup_person_name,
    )


@router.post(
    "/{donation_id}/business-confirm", response_model=BusinessDecisionResponse,
)
async def business_confirm_donation(
    donation_id: int,
    body: BusinessDecision,
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Donor accepts or rejects the proposed pickup."""
    await orchestrator.business_confirm(DonationId(donation_id), actor, body.accept)
    return BusinessDecisionResponse(
        message=(
            messages.PICKUP_ACCEPTED if body.accept
            else messages.RESERVATION_REJECTED
        ),
        accepted=body.accept,
    )


@router.post("/{donation_id}/confirm", response_model=ConfirmationResponse)
async def confirm_donation(
    donation_id: int,
    body: ConfirmationRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Donor or recipient acknowledges the handover with the verification code."""
    outcome = await orchestrator.confirm(
        DonationId(donation_id), actor, body.verification_code,
    )
    if outcome.completed:
        message = messages.DONATION_COMPLETED
    elif outcome.side is ConfirmationSide.DONOR:
        message = messages.DONOR_CONFIRMATION_REGISTERED
    else:
        message = messages.RECIPIENT_CONFIRMATION_REGISTERED
    return ConfirmationResponse(
        message=message, side=outcome.side, completed=outcome.completed,
    )
