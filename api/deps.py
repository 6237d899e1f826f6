# internal imports
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Header
from sqlmodel import Session, select

# external imports
from db.database import get_session
from db.models import AppRole, UserRole
from services.errors import PermissionDeniedError


@dataclass(frozen=True)
class Actor:
    """The caller of a request, as asserted by the identity provider."""

    user_id: Optional[str]
    role: AppRole = AppRole.patient

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None


def get_actor(
    x_user_id: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> Actor:
    user_id = (x_user_id or "").strip() or None
    if user_id is None:
        return Actor(user_id=None)

    assigned = session.exec(select(UserRole).where(UserRole.user_id == user_id)).first()
    return Actor(user_id=user_id, role=AppRole(assigned.role) if assigned else AppRole.patient)


def require_user(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.is_anonymous:
        raise PermissionDeniedError("Sign in required")
    return actor


def require_role(*roles: AppRole):
    def dependency(actor: Actor = Depends(require_user)) -> Actor:
        if actor.role not in roles:
            raise PermissionDeniedError(f"Requires role: {', '.join(r.value for r in roles)}")
        return actor

    return dependency
