# app/marks/repository.py
from __future__ import annotations

import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, InvalidMarkType, ReferentialError
from app.marks.models import Mark, utcnow

log = logging.getLogger("uvicorn")

# SQLSTATE de postgres para violación de FK
_FK_VIOLATION = "23503"


def _is_fk_violation(exc: IntegrityError) -> bool:
    """
    asyncpg / psycopg exponen el SQLSTATE; sqlite solo el mensaje
    ("FOREIGN KEY constraint failed").
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == _FK_VIOLATION
    return "foreign key" in str(orig).lower()


# -------------------------
# LECTURA
# -------------------------
async def find_mark(
    db: AsyncSession,
    *,
    user_id: int,
    mark_type: str,
    post_id: int | None = None,
    per_post: bool = True,
) -> Mark | None:
    """
    Marca de `user_id` con ese tipo. Con per_post=False NO se filtra por post
    (clave de búsqueda {user, type}); si por una carrera vieja hay varias,
    gana la que ya está en `post_id` y luego la más reciente. Mover otra fila
    a `post_id` chocaría siempre contra el unique.
    """
    q = select(Mark).where(Mark.user_id == user_id, Mark.type == mark_type)
    order = [Mark.updated_at.desc(), Mark.id.desc()]
    if post_id is not None:
        if per_post:
            q = q.where(Mark.post_id == post_id)
        else:
            order.insert(0, (Mark.post_id == post_id).desc())
    q = q.order_by(*order).limit(1)
    res = await db.execute(q)
    return res.scalars().first()


async def count_by_type(db: AsyncSession, post_id: int, mark_type: str) -> int:
    q = (
        select(func.count())
        .select_from(Mark)
        .where(Mark.post_id == post_id, Mark.type == mark_type)
    )
    res = await db.execute(q)
    return int(res.scalar_one() or 0)


async def count_by_types(db: AsyncSession, post_id: int) -> dict[str, int]:
    """
    {type: total} de un post. Solo aparecen los tipos con al menos una marca.
    """
    q = (
        select(Mark.type, func.count(Mark.id))
        .where(Mark.post_id == post_id)
        .group_by(Mark.type)
    )
    res = await db.execute(q)
    return {mark_type: int(total) for mark_type, total in res.all()}


async def list_user_mark_types(
    db: AsyncSession,
    post_id: int,
    user_id: int,
) -> set[str]:
    res = await db.execute(
        select(Mark.type).where(Mark.post_id == post_id, Mark.user_id == user_id)
    )
    return {row[0] for row in res.all()}


async def list_post_marks(db: AsyncSession, post_id: int) -> list[Mark]:
    res = await db.execute(
        select(Mark)
        .where(Mark.post_id == post_id)
        .order_by(Mark.created_at.asc(), Mark.id.asc())
    )
    return list(res.scalars())


async def list_user_marks(db: AsyncSession, user_id: int) -> list[Mark]:
    res = await db.execute(
        select(Mark).where(Mark.user_id == user_id).order_by(Mark.id.asc())
    )
    return list(res.scalars())


# -------------------------
# UPSERT
# -------------------------
async def upsert_mark(
    db: AsyncSession,
    *,
    user_id: int,
    post_id: int,
    mark_type: str,
    per_post: bool = False,
    retries: int = 1,
) -> Mark:
    """
    Crea o actualiza la marca y la devuelve con post_id = post_id y
    updated_at refrescado.

    Clave de búsqueda:
      - per_post=False → {user_id, type}: si el usuario ya tiene ese tipo en
        OTRO post, esa fila se MUEVE a este post (comportamiento heredado).
      - per_post=True  → {user_id, post_id, type}, igual que el unique.

    Cada escritura va en un SAVEPOINT. Si choca con el unique (otro upsert
    insertó entre nuestro SELECT y nuestro INSERT) se vuelve a buscar y se
    actualiza; tras `retries` reintentos → ConflictError.
    No hace commit (lo hace el caller).
    """
    if not mark_type:
        raise InvalidMarkType("mark type required")

    for attempt in range(retries + 1):
        existing = await find_mark(
            db,
            user_id=user_id,
            mark_type=mark_type,
            post_id=post_id,
            per_post=per_post,
        )
        try:
            async with db.begin_nested():
                if existing:
                    existing.post_id = post_id
                    existing.updated_at = utcnow()
                    mark = existing
                else:
                    mark = Mark(user_id=user_id, post_id=post_id, type=mark_type)
                    db.add(mark)
                await db.flush()
        except IntegrityError as e:
            if _is_fk_violation(e):
                raise ReferentialError(
                    f"user {user_id} or post {post_id} does not exist"
                ) from e
            log.warning(
                f"⚠️ upsert mark en carrera (user={user_id}, post={post_id}, "
                f"type={mark_type!r}, intento {attempt + 1}): {e.orig!r}"
            )
            continue

        await db.refresh(mark)
        return mark

    log.error(
        f"❌ upsert mark sin resolver tras {retries + 1} intentos "
        f"(user={user_id}, post={post_id}, type={mark_type!r})"
    )
    raise ConflictError(
        f"mark ({user_id}, {post_id}, {mark_type!r}) kept conflicting"
    )
