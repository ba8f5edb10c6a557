from enum import Enum
from pydantic import BaseModel


class Role(str, Enum):
    ADMIN = "Admin"
    FACULTY = "Faculty"


class Identity(BaseModel):
    """The acting employee, resolved upstream by the identity provider."""
    id: str
    name: str
    department: str = ""
    role: Role = Role.FACULTY

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# Actor used for system-initiated events (seeding, rollups triggered by jobs)
SYSTEM_IDENTITY = Identity(id="system", name="System", department="", role=Role.ADMIN)
