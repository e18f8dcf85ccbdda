# app/posts/repository.py
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.posts.models import Post


async def create_post(db: AsyncSession, title: str, body: str | None = None) -> Post:
    post = Post(title=title, body=body)
    db.add(post)
    await db.flush()
    await db.refresh(post)
    return post


async def list_posts(db: AsyncSession) -> list[Post]:
    # sin paginación: el índice muestra todos
    res = await db.execute(select(Post).order_by(desc(Post.created_at), desc(Post.id)))
    return list(res.scalars())


async def get_post(db: AsyncSession, post_id: int) -> Post | None:
    res = await db.execute(select(Post).where(Post.id == post_id))
    return res.scalar_one_or_none()


async def delete_post(db: AsyncSession, post: Post) -> None:
    # las marks caen por ON DELETE CASCADE
    await db.delete(post)
    await db.flush()
