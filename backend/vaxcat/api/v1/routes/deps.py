"""Module: deps."""

import uuid
from typing import Callable, Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from vaxcat.core.errors import ValidationError
from vaxcat.core.security import Actor, TokenError, decode_access_token
from vaxcat.db.session import SessionLocal

# Dependency provider: one DB session per request lifecycle.
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Validate and coerce UUID inputs from query/path payloads.
def parse_uuid(value: str, field_name: str = "id") -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (must be UUID)")


def _get_token_value(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="No token")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")

    return parts[1].strip()


def get_current_actor(authorization: str | None = Header(default=None)) -> Actor:
    token = _get_token_value(authorization)
    try:
        return decode_access_token(token)
    except TokenError as exc:
        raise HTTPException(status_code=401, detail=str(exc))


# Route guard: resolves the caller and rejects roles outside ``roles``.
def require_roles(*roles: str) -> Callable[..., Actor]:
    allowed = set(roles)

    def _guard(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(status_code=403, detail="Access denied")
        return actor

    return _guard
