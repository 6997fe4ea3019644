import hmac
from datetime import UTC, datetime, timedelta

import jwt
from fastapi.security import APIKeyHeader, HTTPBearer

from app.models import AuthContext

from .config import settings

# Missing credentials are not an error at this layer; writers decide.
bearer_scheme = HTTPBearer(auto_error=False)
admin_api_key_header = APIKeyHeader(
    name="X-Admin-Key", scheme_name="admin_api_key_header", auto_error=False
)


# JWT Functions
def create_access_token(data: dict, expires_delta: timedelta = timedelta(days=1)) -> str:
    """Create a signed token, used by the identity provider bridge and tests"""
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(UTC) + expires_delta})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> AuthContext | None:
    """Verify and decode JWT token"""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.PyJWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    return AuthContext(subject=subject, email=payload.get("email"))


def verify_admin_key(api_key: str) -> bool:
    return hmac.compare_digest(api_key, settings.admin_api_key)
