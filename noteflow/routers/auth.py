"""
Authentication router.

Accounts are email + bcrypt password hash. A successful register or login
returns a signed JWT whose ``sub`` is the user id; every other router
resolves the caller through the ``get_current_user`` dependency.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from noteflow.config import get_settings
from noteflow.database import get_database
from noteflow.models.user import TokenResponse, UserCreate, UserLogin, UserResponse
from noteflow.utils.validators import validate_password

logger = logging.getLogger(__name__)
router = APIRouter()
bearer = HTTPBearer()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: str) -> str:
    settings = get_settings()
    issued = datetime.utcnow()
    claims = {
        "sub": user_id,
        "iat": issued,
        "exp": issued + timedelta(hours=settings.jwt_expiration_hours),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id carried by a valid token, or None."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    return claims.get("sub") or None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
) -> dict:
    """Resolve the bearer token to ``{"id", "email", "name"}`` or fail with 401."""
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = await get_database().users.find_one({"_id": user_id})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    return {"id": user["_id"], "email": user["email"], "name": user["name"]}


def _session(user: dict) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user["_id"]),
        user=UserResponse(
            id=user["_id"],
            email=user["email"],
            name=user["name"],
            created_at=user["createdAt"],
        ),
    )


@router.post("/register", response_model=TokenResponse)
async def register(data: UserCreate) -> TokenResponse:
    """Create an account and sign it in."""
    ok, message = validate_password(data.password)
    if not ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

    db = get_database()
    email = data.email.lower()
    if await db.users.count_documents({"email": email}):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = {
        "email": email,
        "name": data.name.strip(),
        "passwordHash": hash_password(data.password),
        "createdAt": datetime.utcnow(),
    }
    user["_id"] = (await db.users.insert_one(user)).inserted_id
    logger.info(f"Registered user {user['_id']}")

    return _session(user)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin) -> TokenResponse:
    """Exchange email + password for a token."""
    user = await get_database().users.find_one({"email": credentials.email.lower()})
    if not user or not verify_password(credentials.password, user["passwordHash"]):
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _session(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user)) -> UserResponse:
    user = await get_database().users.find_one({"_id": current_user["id"]})
    return UserResponse(
        id=user["_id"],
        email=user["email"],
        name=user["name"],
        created_at=user["createdAt"],
    )
