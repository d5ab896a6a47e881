"""
Bearer token verification and role gating.

Tokens are minted by another service; this module only checks the signature
against the shared secret and reads the ``id`` and ``role`` claims. Claims are
exactly as trustworthy as the signature scheme, so payloads without a usable
subject or role are rejected rather than defaulted.
"""

from typing import Optional

import jwt

from app.core.errors import InsufficientRole, InvalidCredential, MissingCredential
from app.core.logger import logger
from app.models.claims import ADMIN_ROLE, AuthClaims

SUBJECT_CLAIMS = ("id", "user_id", "sub")


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Return the second space-separated segment of an Authorization header.

    Raises:
        MissingCredential: header absent or has no token segment
    """
    if not authorization:
        raise MissingCredential()

    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        raise MissingCredential()

    return parts[1]


class TokenVerifier:
    """Verifies signed tokens with an injected secret and algorithm"""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("TokenVerifier requires a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm

    def decode(self, token: str) -> dict:
        """
        Decode and validate a token.

        Raises:
            InvalidCredential: bad signature, malformed token or expired token
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise InvalidCredential("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}", metadata={"event": "token_rejected"})
            raise InvalidCredential()

    def verify(self, token: str) -> AuthClaims:
        payload = self.decode(token)

        subject_id = next(
            (payload[key] for key in SUBJECT_CLAIMS if payload.get(key) not in (None, "")),
            None,
        )
        role = payload.get("role")

        if subject_id is None or isinstance(subject_id, (dict, list, bool)):
            logger.warning("Invalid token: missing subject", metadata={"event": "token_rejected"})
            raise InvalidCredential()
        if not isinstance(role, str):
            logger.warning("Invalid token: missing role", metadata={"event": "token_rejected"})
            raise InvalidCredential()

        return AuthClaims(subject_id=str(subject_id), role=role)

    def verify_header(self, authorization: Optional[str]) -> AuthClaims:
        return self.verify(extract_bearer_token(authorization))


def require_role(claims: AuthClaims, role: str = ADMIN_ROLE) -> AuthClaims:
    """Admit the caller only if the verified claims carry ``role``"""
    if not claims.has_role(role):
        logger.warning(
            f"Access denied for subject {claims.subject_id}",
            user_id=claims.subject_id,
            metadata={"event": "access_denied", "role": claims.role, "required_role": role},
        )
        raise InsufficientRole()
    return claims
