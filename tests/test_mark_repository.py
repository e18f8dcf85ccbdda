from datetime import datetime, timezone

import pytest

from app.core.errors import ConflictError, InvalidMarkType, ReferentialError
from app.marks import repository as repo
from app.marks.models import Mark
from app.posts.repository import delete_post
from app.users.repository import delete_user


async def test_remark_same_triple_updates_in_place(db, make_user, make_post):
    user = await make_user()
    post = await make_post()

    first = await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="like")
    first_id, first_updated = first.id, first.updated_at

    second = await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="like")

    assert second.id == first_id
    assert second.updated_at >= first_updated
    assert len(await repo.list_post_marks(db, post.id)) == 1


async def test_store_accepts_any_non_empty_type(db, make_user, make_post):
    user = await make_user()
    post = await make_post()

    mark = await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="liek")

    assert mark.type == "liek"
    assert await repo.count_by_type(db, post.id, "liek") == 1


async def test_store_rejects_empty_type(db, make_user, make_post):
    user = await make_user()
    post = await make_post()

    with pytest.raises(InvalidMarkType):
        await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="")


async def test_count_by_type_counts_distinct_users(db, make_user, make_post):
    post = await make_post()
    for _ in range(3):
        user = await make_user()
        await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="like")

    assert await repo.count_by_type(db, post.id, "like") == 3
    assert await repo.count_by_type(db, post.id, "favorite") == 0


async def test_count_by_types_groups_per_type(db, make_user, make_post):
    post = await make_post()
    other = await make_post()
    u1, u2 = await make_user(), await make_user()

    await repo.upsert_mark(db, user_id=u1.id, post_id=post.id, mark_type="like")
    await repo.upsert_mark(db, user_id=u2.id, post_id=post.id, mark_type="like")
    await repo.upsert_mark(db, user_id=u1.id, post_id=post.id, mark_type="bookmark")
    await repo.upsert_mark(db, user_id=u2.id, post_id=other.id, mark_type="love")

    assert await repo.count_by_types(db, post.id) == {"like": 2, "bookmark": 1}
    assert await repo.list_user_mark_types(db, post.id, u1.id) == {"like", "bookmark"}


async def test_same_type_on_another_post_moves_the_mark(db, make_user, make_post):
    # clave de búsqueda {user, type}: la marca "like" del usuario es UNA sola
    # y se va al último post que marcó. Sorprendente, pero es lo heredado.
    user = await make_user()
    p1, p2 = await make_post(), await make_post()

    first = await repo.upsert_mark(db, user_id=user.id, post_id=p1.id, mark_type="like")
    first_id = first.id
    moved = await repo.upsert_mark(db, user_id=user.id, post_id=p2.id, mark_type="like")

    marks = await repo.list_user_marks(db, user.id)
    assert len(marks) == 1
    assert moved.id == first_id
    assert moved.post_id == p2.id
    assert await repo.count_by_type(db, p1.id, "like") == 0
    assert await repo.count_by_type(db, p2.id, "like") == 1


async def test_per_post_scope_keeps_one_mark_per_post(db, make_user, make_post):
    user = await make_user()
    p1, p2 = await make_post(), await make_post()

    await repo.upsert_mark(db, user_id=user.id, post_id=p1.id, mark_type="like", per_post=True)
    await repo.upsert_mark(db, user_id=user.id, post_id=p2.id, mark_type="like", per_post=True)
    await repo.upsert_mark(db, user_id=user.id, post_id=p2.id, mark_type="like", per_post=True)

    marks = await repo.list_user_marks(db, user.id)
    assert sorted(m.post_id for m in marks) == sorted([p1.id, p2.id])
    assert await repo.count_by_type(db, p1.id, "like") == 1
    assert await repo.count_by_type(db, p2.id, "like") == 1


async def test_unknown_user_raises_referential_error(db, make_post):
    post = await make_post()

    with pytest.raises(ReferentialError):
        await repo.upsert_mark(db, user_id=9999, post_id=post.id, mark_type="like")

    assert await repo.list_post_marks(db, post.id) == []


async def test_unknown_post_raises_referential_error(db, make_user):
    user = await make_user()

    with pytest.raises(ReferentialError):
        await repo.upsert_mark(db, user_id=user.id, post_id=9999, mark_type="like")

    assert await repo.list_user_marks(db, user.id) == []


async def test_insert_race_is_retried_as_update(db, make_user, make_post, monkeypatch):
    user = await make_user()
    post = await make_post()
    existing = await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="like")
    existing_id = existing.id

    real_find = repo.find_mark
    calls = {"n": 0}

    async def stale_then_real(*args, **kwargs):
        # la primera lectura "no ve" la fila que insertó el otro request
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_find(*args, **kwargs)

    monkeypatch.setattr(repo, "find_mark", stale_then_real)

    mark = await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="like")

    assert calls["n"] == 2
    assert mark.id == existing_id
    assert len(await repo.list_post_marks(db, post.id)) == 1


async def test_race_that_never_resolves_raises_conflict(db, make_user, make_post, monkeypatch):
    user = await make_user()
    post = await make_post()
    await repo.upsert_mark(db, user_id=user.id, post_id=post.id, mark_type="like")

    async def always_stale(*args, **kwargs):
        return None

    monkeypatch.setattr(repo, "find_mark", always_stale)

    with pytest.raises(ConflictError):
        await repo.upsert_mark(
            db, user_id=user.id, post_id=post.id, mark_type="like", retries=2
        )

    # el savepoint deja la sesión usable y la fila original intacta
    assert await repo.count_by_type(db, post.id, "like") == 1


async def test_deleting_post_cascades_to_marks(db, make_user, make_post):
    post = await make_post()
    keep = await make_post()
    u1, u2 = await make_user(), await make_user()
    await repo.upsert_mark(db, user_id=u1.id, post_id=post.id, mark_type="like")
    await repo.upsert_mark(db, user_id=u2.id, post_id=post.id, mark_type="favorite")
    await repo.upsert_mark(db, user_id=u2.id, post_id=keep.id, mark_type="bookmark")
    post_id = post.id

    await delete_post(db, post)

    assert await repo.list_post_marks(db, post_id) == []
    assert await repo.count_by_type(db, keep.id, "bookmark") == 1


async def test_deleting_user_cascades_to_marks(db, make_user, make_post):
    post = await make_post()
    gone, stays = await make_user(), await make_user()
    await repo.upsert_mark(db, user_id=gone.id, post_id=post.id, mark_type="like")
    await repo.upsert_mark(db, user_id=gone.id, post_id=post.id, mark_type="bookmark")
    await repo.upsert_mark(db, user_id=stays.id, post_id=post.id, mark_type="like")
    gone_id = gone.id

    await delete_user(db, gone)

    assert await repo.list_user_marks(db, gone_id) == []
    assert await repo.count_by_types(db, post.id) == {"like": 1}


async def test_leftover_duplicate_type_prefers_row_on_target_post(db, make_user, make_post):
    # estado que deja una carrera vieja con clave {user, type}: dos "like"
    # del mismo usuario en posts distintos, el más reciente NO en el destino
    user = await make_user()
    p1, p2 = await make_post(), await make_post()
    older = Mark(
        user_id=user.id, post_id=p2.id, type="like",
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    newer = Mark(
        user_id=user.id, post_id=p1.id, type="like",
        updated_at=datetime(2026, 1, 2, tzinfo=timezone.utc),
    )
    db.add_all([older, newer])
    await db.commit()
    older_id = older.id

    mark = await repo.upsert_mark(db, user_id=user.id, post_id=p2.id, mark_type="like")

    assert mark.id == older_id
    assert mark.post_id == p2.id
    assert len(await repo.list_user_marks(db, user.id)) == 2
    assert await repo.count_by_type(db, p1.id, "like") == 1
    assert await repo.count_by_type(db, p2.id, "like") == 1
