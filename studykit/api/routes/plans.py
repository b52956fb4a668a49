"""Plan info route: the caller's tier and the features it unlocks."""

from fastapi import APIRouter, Depends

from studykit.api.deps import get_plan_service
from studykit.core.auth import AuthUser, require_auth
from studykit.domain.plans import PlanCatalog
from studykit.services.plan_service import UserPlanService

router = APIRouter()


@router.get("/plan")
async def get_user_plan(
    user: AuthUser = Depends(require_auth),
    plans: UserPlanService = Depends(get_plan_service),
) -> dict:
    tier = await plans.get_tier(user.user_id)
    return {"plan": tier.value, "features": PlanCatalog().plan_features(tier)}
