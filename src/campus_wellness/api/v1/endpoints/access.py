"""Endpoints describing the caller's own privileges."""

from fastapi import APIRouter

from campus_wellness.schemas.access import AccessContextResponse, DepartmentRefResponse
from campus_wellness.services.access import AccessContext

from ..dependencies import AccessCacheDep, AccessDep, FreshAccessDep, IdentityDep

router = APIRouter(prefix="/access", tags=["access"])


def _render(ctx: AccessContext) -> AccessContextResponse:
    head = ctx.department_head_of
    return AccessContextResponse(
        user_id=ctx.user_id,
        email=ctx.email,
        is_admin=ctx.is_admin,
        is_moderator=ctx.is_moderator,
        department_head_of=(
            DepartmentRefResponse(id=head.id, code=head.code, name=head.name) if head else None
        ),
        authorities=ctx.authorities(),
        resolved_at=ctx.resolved_at,
    )


@router.get("/me", response_model=AccessContextResponse)
async def read_my_access(ctx: AccessDep) -> AccessContextResponse:
    """Return the access context cached for this session."""
    return _render(ctx)


@router.post("/refresh", response_model=AccessContextResponse)
async def refresh_my_access(ctx: FreshAccessDep) -> AccessContextResponse:
    """Re-resolve this session's privileges from the authority store."""
    return _render(ctx)


@router.delete("/session", status_code=204)
async def sign_out(identity: IdentityDep, cache: AccessCacheDep) -> None:
    """Forget the cached context of this session."""
    cache.invalidate(identity.session_id or identity.user_id)
