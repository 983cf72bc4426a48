from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from libs.common.config import get_settings


class AuthUser(BaseModel):
    """
    The authenticated actor, decoded from the bearer JWT.

    Identity provisioning lives outside this system; ``user_id`` is the
    token subject and is what TeamMember.user_id and Team.creator_id hold.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"
    app_metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def roles(self) -> list[str]:
        return list(self.app_metadata.get("roles") or [])

    @property
    def is_admin(self) -> bool:
        """Platform admin: privileged token role or an admin app_metadata role."""
        admin_roles = set(get_settings().ADMIN_ROLES)
        return self.role in admin_roles or bool(admin_roles.intersection(self.roles))
