"""Module: security.

Bearer-token verification. Tokens are issued by the identity service; this
module only checks the signature and turns the ``id``/``role`` claims into an
``Actor`` the routes can authorize against.
"""

import logging
from dataclasses import dataclass

import jwt

from vaxcat.core.config import settings

logger = logging.getLogger(__name__)

ROLE_PATIENT = "Patient"
ROLE_DOCTOR = "Doctor"
ROLE_ADMIN = "Admin"
VALID_ROLES = {ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN}


@dataclass(frozen=True)
class Actor:
    actor_id: str
    role: str

    @property
    def is_staff(self) -> bool:
        return self.role in (ROLE_DOCTOR, ROLE_ADMIN)


class TokenError(Exception):
    pass


def _normalize_role(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = value.strip().capitalize()
    return cleaned if cleaned in VALID_ROLES else None


def decode_access_token(token: str) -> Actor:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.warning("Rejected expired bearer token")
        raise TokenError("Token expired")
    except jwt.InvalidTokenError:
        logger.warning("Rejected invalid bearer token")
        raise TokenError("Invalid token")

    actor_id = claims.get("id") or claims.get("sub")
    role = _normalize_role(claims.get("role"))
    if not actor_id or not role:
        logger.warning("Bearer token missing id or role claim")
        raise TokenError("Invalid token")

    return Actor(actor_id=str(actor_id), role=role)
