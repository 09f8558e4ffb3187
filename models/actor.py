"""Identity of the acting user, as supplied by the authentication collaborator."""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    ADMIN = "admin"
    INTERVENTIONIST = "interventionist"
    TEACHER = "teacher"


# Only these roles may create schoolwide constraints or modify others' constraints
ELEVATED_ROLES: frozenset[Role] = frozenset({Role.ADMIN})


def is_elevated(role: Role | str) -> bool:
    return Role(role) in ELEVATED_ROLES


class Actor(BaseModel):
    id: str
    role: Role = Role.INTERVENTIONIST

    @property
    def is_elevated(self) -> bool:
        return is_elevated(self.role)
