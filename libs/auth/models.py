import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    SHOP_OWNER = "shop_owner"
    ADMIN = "admin"

    @classmethod
    def _missing_(cls, value):
        # Accept "SHOP_OWNER" as well as "shop_owner"
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class AuthUser(BaseModel):
    """
    Identity resolved from a verified access token.

    Only the user id and role are trusted for authorization decisions.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
