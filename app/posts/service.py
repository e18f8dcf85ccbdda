# app/posts/service.py
from sqlalchemy.ext.asyncio import AsyncSession

from app.marks.repository import count_by_types, list_user_mark_types
from app.marks.service import LIKE, FAVORITE, BOOKMARK
from app.posts.models import Post


async def hydrate_post_out(
    db: AsyncSession, post: Post, *, viewer_id: int | None = None
) -> dict:
    """
    Devuelve el dict que espera el front para un Post:
    - marks_count: {type: total}, recontado en cada lectura (sin caché)
    - likes/favorites/bookmarks_count: los tres botones fijos
    - marked: tipos que el viewer ya puso
    """
    counts = await count_by_types(db, post.id)
    marked = (
        sorted(await list_user_mark_types(db, post.id, viewer_id))
        if viewer_id
        else []
    )

    return {
        "id": post.id,
        "title": post.title,
        "body": post.body,
        "created_at": post.created_at,
        "marks_count": counts,
        "likes_count": counts.get(LIKE, 0),
        "favorites_count": counts.get(FAVORITE, 0),
        "bookmarks_count": counts.get(BOOKMARK, 0),
        "marked": marked,
    }
