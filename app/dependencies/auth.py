"""
Authentication dependencies for FastAPI

The verifier is built from configuration at the edge and injected, so tests and
alternative deployments can swap the secret without touching global state.
"""

from functools import lru_cache
from typing import Optional, Type

from fastapi import Depends, Header, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.config import config
from app.core.logger import logger
from app.core.security import TokenVerifier, require_role
from app.models.claims import ADMIN_ROLE, AuthClaims


@lru_cache(maxsize=1)
def get_token_verifier() -> TokenVerifier:
    """Verifier configured from JWT_SECRET / JWT_ALGORITHM"""
    return TokenVerifier(config.jwt_secret, config.jwt_algorithm)


async def get_current_claims(
    authorization: Optional[str] = Header(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthClaims:
    """
    Dependency returning the verified claims of the caller.

    Raises MissingCredential (403) without a token and InvalidCredential (401)
    when the token does not verify.
    """
    claims = verifier.verify_header(authorization)
    logger.debug(
        f"Authentication successful for subject: {claims.subject_id}",
        user_id=claims.subject_id,
    )
    return claims


async def require_admin(claims: AuthClaims = Depends(get_current_claims)) -> AuthClaims:
    """
    Access gate for mutating routes.

    Usage:
        @router.delete("/{product_id}")
        async def delete_item(claims: AuthClaims = Depends(require_admin)):
            ...
    """
    return require_role(claims, ADMIN_ROLE)


def admin_body(schema: Type[BaseModel]):
    """
    Request body dependency for admin routes.

    FastAPI decodes declared body parameters before it runs any dependency, so a
    malformed body would be reported ahead of a missing token. Reading the body
    here, behind ``require_admin``, keeps the access gate first.
    """

    async def parse(request: Request, claims: AuthClaims = Depends(require_admin)):
        try:
            payload = await request.json()
        except ValueError:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
            )

        try:
            return schema.model_validate(payload)
        except PydanticValidationError as e:
            errors = [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
            raise RequestValidationError(errors, body=payload)

    return parse
