"""
Shared FastAPI dependencies for the v1 routers.

Overridable through app.dependency_overrides in tests.
"""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from ..agents.script_matching.orchestrator import ScriptMatcher
from ..auth.dependencies import User, get_current_user
from ..config import Settings
from ..db.media_catalog import MediaCatalog, SupabaseMediaCatalog
from ..db.workflow_state import SupabaseWorkflowStateStore, WorkflowStateStore
from ..services.rate_limiter import RateLimiter, RateLimitExceeded


def get_rate_limiter(request: Request) -> RateLimiter:
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        raise RuntimeError("Rate limiter not initialized. Is the app lifespan running?")
    return limiter


def rate_limited(policy: str = "default"):
    """Dependency factory: take one token per request for the current user."""

    async def dependency(
        user: User = Depends(get_current_user),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> User:
        try:
            limiter.check(policy, user.sub)
        except RateLimitExceeded as exc:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=str(exc),
                headers={"Retry-After": str(exc.retry_after)},
            ) from exc
        return user

    return dependency


def get_media_catalog() -> MediaCatalog:
    return SupabaseMediaCatalog()


def get_workflow_state_store() -> WorkflowStateStore:
    return SupabaseWorkflowStateStore()


def get_script_matcher() -> ScriptMatcher:
    return ScriptMatcher(timeout=Settings.AI_MATCHING_TIMEOUT)
