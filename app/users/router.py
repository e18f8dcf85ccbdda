# app/users/router.py
from fastapi import APIRouter, Depends, HTTPException, status, Header, Query
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.users.schemas import UserCreate, UserOut, TokenOut
from app.users import service as svc
from app.core.security import extract_token, user_id_from_token

router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("/register/", response_model=TokenOut)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_session)):
    try:
        token = await svc.register_user(db, payload)
        await db.commit()
        return {"access_token": token, "token_type": "bearer"}
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/login/", response_model=TokenOut)
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """
    Acepta x-www-form-urlencoded con:
    - username
    - password
    (puedes usar también el email como username)
    """
    try:
        token = await svc.login_user(db, form.username, form.password)
        return {"access_token": token, "token_type": "bearer"}
    except ValueError:
        raise HTTPException(status_code=401, detail="invalid credentials")

@router.get("/me/", response_model=UserOut)
async def me(
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
):
    tok = extract_token(token, authorization)
    if not tok:
        raise HTTPException(status_code=401, detail="missing token")

    user_id = user_id_from_token(tok)
    if user_id is None:
        raise HTTPException(status_code=401, detail="invalid token")

    user = await svc.resolve_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user not found")
    return user
