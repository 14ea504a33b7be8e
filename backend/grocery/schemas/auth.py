"""Identity carried by the bearer token."""

from uuid import UUID

from pydantic import BaseModel

ADMIN_ROLE = "admin"


class CurrentUser(BaseModel):
    id: UUID
    email: str
    role: str

    @classmethod
    def from_claims(cls, claims: dict) -> "CurrentUser":
        """Build from decoded JWT claims. Raises KeyError/ValueError on missing or malformed ones."""
        return cls(id=UUID(claims["sub"]), email=claims.get("email", ""), role=claims["role"])