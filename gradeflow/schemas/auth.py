"""
Pydantic schemas for the acting user.
"""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


STAFF_ROLES = (Role.TEACHER, Role.ADMIN)


class Actor(BaseModel):
    id: str
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
