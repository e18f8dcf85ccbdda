# app/marks/service.py
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import InvalidMarkType, NotFound, Unauthenticated
from app.marks.models import Mark
from app.marks.repository import upsert_mark
from app.posts.repository import get_post
from app.users.service import resolve_user

log = logging.getLogger("uvicorn")

# tipos de los tres botones dedicados
LIKE = "like"
FAVORITE = "favorite"
BOOKMARK = "bookmark"


def normalize_mark_type(raw: str | None) -> str:
    """
    " Love " → "love". Vacío o fuera de MARK_ALLOWED_TYPES → InvalidMarkType.
    """
    mark_type = (raw or "").strip().lower()
    if not mark_type:
        raise InvalidMarkType("mark type required")
    if mark_type not in settings.allowed_mark_types:
        raise InvalidMarkType(f"unknown mark type: {mark_type!r}")
    return mark_type


async def mark_post(
    db: AsyncSession,
    acting_user_id: int | None,
    post_id: int,
    mark_type: str | None,
) -> Mark:
    """
    Marca `post_id` con `mark_type` en nombre de `acting_user_id`.

    La identidad llega explícita (ya resuelta desde el token por el router);
    None = no autenticado. No hace commit (lo hace el router).
    """
    user = await resolve_user(db, acting_user_id)
    if not user:
        raise Unauthenticated("authentication required")

    post = await get_post(db, post_id)
    if not post:
        raise NotFound(f"post {post_id} not found")

    mark_type = normalize_mark_type(mark_type)

    mark = await upsert_mark(
        db,
        user_id=user.id,
        post_id=post.id,
        mark_type=mark_type,
        per_post=settings.MARK_SCOPE_PER_POST,
        retries=settings.MARK_UPSERT_RETRIES,
    )
    log.info(f"🏷️ mark {mark_type} user={user.id} post={post.id} (id={mark.id})")
    return mark


async def like_post(db: AsyncSession, acting_user_id: int | None, post_id: int) -> Mark:
    return await mark_post(db, acting_user_id, post_id, LIKE)


async def favorite_post(db: AsyncSession, acting_user_id: int | None, post_id: int) -> Mark:
    return await mark_post(db, acting_user_id, post_id, FAVORITE)


async def bookmark_post(db: AsyncSession, acting_user_id: int | None, post_id: int) -> Mark:
    return await mark_post(db, acting_user_id, post_id, BOOKMARK)


async def react_to_post(
    db: AsyncSession,
    acting_user_id: int | None,
    post_id: int,
    mark_type: str | None,
) -> Mark:
    # mismo camino; el tipo viene del form y lo valida normalize_mark_type
    return await mark_post(db, acting_user_id, post_id, mark_type)
