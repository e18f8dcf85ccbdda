# app/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.db.init_db import init_models

# routers
from app.users.router import router as users_router
from app.posts.router import router as posts_router
from app.marks.router import router as marks_router

log = logging.getLogger("uvicorn")

app = FastAPI(title="Marks API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    log.info("🚀 Iniciando servicio…")
    await init_models()
    log.info(
        f"✅ Startup listo. tipos={sorted(settings.allowed_mark_types)} "
        f"per_post={settings.MARK_SCOPE_PER_POST}"
    )


@app.get("/api/health/")
async def health():
    return {"ok": True, "service": "marks"}


# routers
app.include_router(users_router)   # /api/users/...
app.include_router(posts_router)   # /api/posts/ (index, show, create)
app.include_router(marks_router)   # /api/posts/{id}/like|favorite|bookmark|react/
