"""Request identity: JWT-authenticated readers and device-local guests."""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import HTTPException, Request, Response, status
from fastapi.security.utils import get_authorization_scheme_param
from jose import JWTError, jwt

from app.config import get_settings
from app.models.domain import GUEST_PREFIX, Identity

logger = logging.getLogger(__name__)

settings = get_settings()

SECRET_KEY = settings.secret_key
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def generate_guest_id() -> str:
    return f"{GUEST_PREFIX}{uuid.uuid4().hex[:12]}"


def _extract_token_from_request(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None

    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    scheme, param = get_authorization_scheme_param(auth_header)
    if scheme.lower() != "bearer":
        return None
    return param


def identity_from_token(token: str) -> Identity:
    """Decode a bearer token into an identity, raising 401 when it cannot be trusted."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception

    subject = payload.get("sub")
    if not subject:
        raise credentials_exception
    return Identity(user_id=str(subject))


def _set_guest_cookie(response: Response, guest_id: str) -> None:
    response.set_cookie(
        key=settings.guest_cookie_name,
        value=guest_id,
        max_age=settings.guest_cookie_max_age,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
        path="/",
    )


async def get_identity(request: Request, response: Optional[Response] = None) -> Identity:
    """Authenticated identity when a token is present, otherwise the device's guest identity.

    A missing guest id is generated and handed back in a cookie so the same
    device keeps reading and writing the same local snapshot.
    """
    token = _extract_token_from_request(request)
    if token:
        return identity_from_token(token)

    guest_id = request.cookies.get(settings.guest_cookie_name) or request.headers.get("X-Guest-Id")
    if guest_id and guest_id.startswith(GUEST_PREFIX):
        return Identity(user_id=guest_id)

    guest_id = generate_guest_id()
    logger.info(f"Issued new guest identity {guest_id}")
    if response is not None:
        _set_guest_cookie(response, guest_id)
    return Identity(user_id=guest_id)


async def get_identity_dependency(request: Request, response: Response) -> Identity:
    """Wrapper for FastAPI dependency injection of the request identity."""
    return await get_identity(request, response)


def clear_session_cookies(response: Response) -> None:
    """Drop session pointers only; cached and remote progress are left alone."""
    cookie_domain = settings.auth_cookie_domain or None
    response.delete_cookie(key=settings.auth_cookie_name, domain=cookie_domain, path="/")
    response.delete_cookie(key=settings.guest_cookie_name, path="/")
