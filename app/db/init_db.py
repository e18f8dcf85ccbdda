import logging
from app.db.session import engine
from app.db.base import Base

# 👇 importa todos los modelos que deben existir en la DB
from app.users.models import User  # noqa: F401
from app.posts.models import Post  # noqa: F401
from app.marks.models import Mark  # noqa: F401

log = logging.getLogger("uvicorn")


async def init_models():
    """
    Crea/verifica las tablas users, posts y marks.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("✅ DB init: tablas creadas/verificadas.")
    except Exception as e:
        log.error(f"❌ DB init falló: {e!r}")
