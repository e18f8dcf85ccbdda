# app/marks/router.py
from __future__ import annotations

from fastapi import (
    APIRouter,
    Depends,
    Form,
    Header,
    HTTPException,
    Query,
    Request,
)
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ConflictError,
    InvalidMarkType,
    MarkError,
    NotFound,
    ReferentialError,
    Unauthenticated,
)
from app.core.security import extract_token, user_id_from_token
from app.db.session import get_session
from app.marks import service as svc
from app.marks.repository import count_by_types
from app.marks.schemas import MarkCountsOut
from app.posts.repository import get_post
from app.users.service import resolve_user

router = APIRouter(prefix="/api/posts", tags=["marks"])

DEFAULT_RETURN_TO = "/api/posts/"

# error del núcleo → status HTTP
_STATUS_BY_ERROR: dict[type[MarkError], tuple[int, str]] = {
    Unauthenticated: (401, "authentication required"),
    NotFound: (404, "post not found"),
    ReferentialError: (404, "user or post not found"),
    ConflictError: (409, "mark conflict, try again"),
    InvalidMarkType: (422, "invalid mark type"),
}


def _acting_user_id(token: str | None, authorization: str | None) -> int | None:
    # sin token o token inválido → None; el servicio lanza Unauthenticated
    return user_id_from_token(extract_token(token, authorization))


def _return_to(request: Request, next_url: str | None) -> str:
    """
    A dónde volver tras marcar (como redirect()->back()):
    ?next= (solo rutas relativas) → Referer → índice de posts.
    """
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return request.headers.get("referer") or DEFAULT_RETURN_TO


def _http_error(e: MarkError) -> HTTPException:
    for cls, (code, default_detail) in _STATUS_BY_ERROR.items():
        if isinstance(e, cls):
            return HTTPException(status_code=code, detail=str(e) or default_detail)
    return HTTPException(status_code=400, detail=str(e))


async def _run_mark(db: AsyncSession, action, *args) -> None:
    try:
        await action(db, *args)
        await db.commit()
    except MarkError as e:
        await db.rollback()
        raise _http_error(e)


@router.post("/{post_id}/like/")
async def like(
    post_id: int,
    request: Request,
    next: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    await _run_mark(db, svc.like_post, _acting_user_id(token, authorization), post_id)
    return RedirectResponse(_return_to(request, next), status_code=303)


@router.post("/{post_id}/favorite/")
async def favorite(
    post_id: int,
    request: Request,
    next: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    await _run_mark(db, svc.favorite_post, _acting_user_id(token, authorization), post_id)
    return RedirectResponse(_return_to(request, next), status_code=303)


@router.post("/{post_id}/bookmark/")
async def bookmark(
    post_id: int,
    request: Request,
    next: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    await _run_mark(db, svc.bookmark_post, _acting_user_id(token, authorization), post_id)
    return RedirectResponse(_return_to(request, next), status_code=303)


@router.post("/{post_id}/react/")
async def react(
    post_id: int,
    request: Request,
    type: str | None = Form(None),
    next: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    """
    Reacción genérica: el tipo llega en el form (<select name="type">).
    """
    await _run_mark(
        db, svc.react_to_post, _acting_user_id(token, authorization), post_id, type
    )
    return RedirectResponse(_return_to(request, next), status_code=303)


@router.get("/{post_id}/marks/", response_model=MarkCountsOut)
async def mark_counts(
    post_id: int,
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    # mismo criterio que mark_post: token válido Y usuario existente
    if not await resolve_user(db, _acting_user_id(token, authorization)):
        raise HTTPException(status_code=401, detail="authentication required")

    post = await get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="post not found")

    return {"post_id": post.id, "counts": await count_by_types(db, post.id)}
