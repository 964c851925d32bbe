"""
Role capabilities.

Roles are a closed set; capability checks go through these predicates and
are evaluated once per request instead of comparing role strings inline.
"""
from dataclasses import dataclass
from enum import Enum

from registrar.models.records import SectionRecord


class Role(str, Enum):
    STUDENT = "student"
    PROFESSOR = "professor"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPERADMIN})


@dataclass(frozen=True)
class Actor:
    """The authenticated user behind a request."""
    user_id: int
    role: Role


def has_admin_capability(role: Role) -> bool:
    return Role(role) in ADMIN_ROLES


def can_grade_section(actor: Actor, section: SectionRecord) -> bool:
    """Admins may grade any section; professors only their own."""
    if has_admin_capability(actor.role):
        return True
    return Role(actor.role) == Role.PROFESSOR and section.professor_id == actor.user_id
