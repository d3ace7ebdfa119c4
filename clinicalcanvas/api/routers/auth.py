import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicalcanvas.db import get_db
from clinicalcanvas.errors import AuthError, NotFoundError, UnexpectedError, ValidationError
from clinicalcanvas.models import User
from clinicalcanvas.schemas import UserCreate, LoginRequest, AuthResponse, UserPublic
from clinicalcanvas.services.auth_service import (
    PasswordHasher, TokenClaims, TokenService,
    get_current_user, get_password_hasher, get_token_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def get_user_by_email(db: AsyncSession, email: str):
    q = select(User).where(User.email == email)
    res = await db.execute(q)
    return res.scalar_one_or_none()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        if await get_user_by_email(db, user_in.email):
            raise ValidationError("User already exists")

        res = await db.execute(
            insert(User)
            .values(
                email=user_in.email,
                password=hasher.hash(user_in.password),
                name=user_in.name,
                role=user_in.role,
            )
            .returning(User)
        )
        user = res.scalar_one()
        await db.commit()
    except IntegrityError as e:
        # 동시 가입으로 unique 인덱스에 걸린 경우
        await db.rollback()
        raise ValidationError("User already exists") from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise UnexpectedError("Server error during registration") from e

    logger.info(f"Registered therapist account id={user.id}")
    return AuthResponse(token=tokens.issue_for(user), user=UserPublic.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        user = await get_user_by_email(db, req.email)
    except SQLAlchemyError as e:
        raise UnexpectedError("Server error during login") from e

    if not user or not hasher.verify(req.password, user.password):
        logger.warning("Failed login attempt")
        raise AuthError("Invalid credentials")

    return AuthResponse(token=tokens.issue_for(user), user=UserPublic.model_validate(user))


@router.get("/me", response_model=UserPublic)
async def get_my_info(
    claims: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    현재 토큰의 사용자 정보를 반환합니다.
    """
    try:
        user = await db.get(User, claims.user_id)
    except SQLAlchemyError as e:
        raise UnexpectedError("Failed to fetch user") from e
    if user is None:
        raise NotFoundError("User not found")
    return user
