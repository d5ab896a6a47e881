"""
Claims extracted from a verified bearer token
"""

from pydantic import BaseModel, ConfigDict, Field


ADMIN_ROLE = "admin"


class AuthClaims(BaseModel):
    """Per-request identity; derived from the token, never persisted"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    subject_id: str = Field(..., alias="subjectId", min_length=1)
    role: str

    def has_role(self, role: str) -> bool:
        return self.role == role

    def is_admin(self) -> bool:
        return self.has_role(ADMIN_ROLE)
