"""
Role-based authorization.

Roles are a closed set. What each role may do lives in ROLE_POLICY so the
rules can be read in one place instead of being scattered across handlers.
"""

import enum
from dataclasses import dataclass
from typing import Optional


class Role(str, enum.Enum):
    CITIZEN = "citizen"
    OFFICER = "officer"
    ADMIN = "admin"


class Action(str, enum.Enum):
    CREATE_COMPLAINT = "create_complaint"
    LIST_COMPLAINTS = "list_complaints"


class Scope(str, enum.Enum):
    OWN = "own"  # Only records owned by the caller
    ALL = "all"  # Every record


ROLE_POLICY: dict[Role, dict[Action, Scope]] = {
    Role.CITIZEN: {
        Action.CREATE_COMPLAINT: Scope.OWN,
        Action.LIST_COMPLAINTS: Scope.OWN,
    },
    Role.OFFICER: {
        Action.LIST_COMPLAINTS: Scope.ALL,
    },
    Role.ADMIN: {
        Action.LIST_COMPLAINTS: Scope.ALL,
    },
}


@dataclass(frozen=True)
class Grant:
    """A permitted action for a specific caller"""
    user_id: str
    role: Role
    action: Action
    scope: Scope


def scope_for(role: Role, action: Action) -> Optional[Scope]:
    """Return the scope a role holds for an action, or None if denied"""
    return ROLE_POLICY.get(role, {}).get(action)
