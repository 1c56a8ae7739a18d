import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, enum.Enum):
    ADMIN = "admin"
    COACH = "coach"
    CLIENT = "client"


class AuthUser(BaseModel):
    """
    The authenticated actor, decoded from the auth provider's JWT.

    ``sub`` carries the numeric id of the ``users`` row.
    """

    user_id: int = Field(..., alias="sub", gt=0)
    email: Optional[EmailStr] = None
    role: Role = Role.CLIENT

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.COACH)
