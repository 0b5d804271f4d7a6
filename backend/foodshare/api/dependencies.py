"""Route Dependencies — per-request wiring of store, code generator and orchestrator.

Invariants:
    - One SqlDonationRepository per request, bound to that request's session
    - get_code_generator is the single seam for deterministic codes in tests
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.config import get_settings
from foodshare.core.verification_code import CodeGenerator, generate_verification_code
from foodshare.infrastructure.database import get_db
from foodshare.services.donation_store import SqlDonationRepository
from foodshare.services.lifecycle_orchestrator import LifecycleOrchestrator


def get_code_generator() -> CodeGenerator:
    return generate_verification_code


def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    code_generator: CodeGenerator = Depends(get_code_generator),
) -> LifecycleOrchestrator:
    settings = get_settings()
    return LifecycleOrchestrator(
        SqlDonationRepository(db),
        code_generator=code_generator,
        list_limit=settings.donation_list_limit,
        batch_max=settings.donation_batch_max,
    )
