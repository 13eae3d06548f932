# =============================================================================
# app/routers/views.py - View Access Resolution
# =============================================================================
# Lets the client ask "may I show this view?" before rendering it.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.auth.dependencies import get_session_state
from app.dependencies import NavigatorDep
from core.auth import AccessPolicy, GuardDecision, evaluate_access
from core.models.session import SessionState

router = APIRouter()


class ViewResolution(BaseModel):
    path: str
    policy: AccessPolicy
    decision: GuardDecision
    redirect_to: str | None = None


@router.get("/views/resolve", response_model=ViewResolution)
async def resolve_view(
    path: Annotated[str, Query(min_length=1, examples=["/dashboard"])],
    navigator: NavigatorDep,
    state: SessionState = Depends(get_session_state),
) -> ViewResolution:
    """
    Evaluate the guard for a view and record it as the client's location.

    - render: show the view
    - loading: show a neutral spinner and ask again
    - deny: show nothing and go to `redirect_to`

    Evaluated for the caller: without a valid access token for the
    signed-in identity the caller is treated as signed out.
    """
    navigator.set_location(path)
    rule = navigator.views.resolve(path)
    outcome = evaluate_access(rule.policy, state, navigator.paths, rule.failure_target)
    return ViewResolution(
        path=navigator.location,
        policy=rule.policy,
        decision=outcome.decision,
        redirect_to=outcome.redirect_to,
    )
