# app/posts/router.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.core.security import extract_token, user_id_from_token
from app.posts.repository import create_post, get_post, list_posts
from app.posts.schemas import PostCreate, PostOut
from app.posts.service import hydrate_post_out

router = APIRouter(prefix="/api/posts", tags=["posts"])


def _viewer_id(token: str | None, authorization: str | None) -> int:
    tok = extract_token(token, authorization)
    if not tok:
        raise HTTPException(status_code=401, detail="missing token")
    viewer_id = user_id_from_token(tok)
    if viewer_id is None:
        raise HTTPException(status_code=401, detail="invalid token")
    return viewer_id


@router.get("/", response_model=List[PostOut])
async def index(
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    viewer_id = _viewer_id(token, authorization)
    posts = await list_posts(db)
    return [await hydrate_post_out(db, p, viewer_id=viewer_id) for p in posts]


@router.post("/", response_model=PostOut, status_code=201)
async def publish(
    body: PostCreate,
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    viewer_id = _viewer_id(token, authorization)
    post = await create_post(db, title=body.title, body=body.body)
    await db.commit()
    return await hydrate_post_out(db, post, viewer_id=viewer_id)


@router.get("/{post_id}/", response_model=PostOut)
async def show(
    post_id: int,
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    viewer_id = _viewer_id(token, authorization)
    post = await get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="post not found")
    return await hydrate_post_out(db, post, viewer_id=viewer_id)
