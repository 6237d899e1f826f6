# internal imports
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

# external imports
from api.deps import Actor, require_role, require_user
from db.database import get_session
from db.models import AppRole, Profile, UserRole, utcnow
from services.schemas import ProfileRead, ProfileUpdate, RoleUpdate


router = APIRouter(prefix="/api/profile", tags=["profile"])


def profile_for(session: Session, user_id: str) -> Profile:
    profile = session.exec(select(Profile).where(Profile.user_id == user_id)).first()
    return profile or Profile(user_id=user_id)


def as_read(profile: Profile, role: AppRole) -> ProfileRead:
    return ProfileRead(
        user_id=profile.user_id,
        full_name=profile.full_name,
        phone=profile.phone,
        avatar_url=profile.avatar_url,
        notification_preferences=profile.notification_preferences,
        role=AppRole(role).value,
    )


@router.get("/me", response_model=ProfileRead)
def get_profile(session: Session = Depends(get_session), actor: Actor = Depends(require_user)):
    return as_read(profile_for(session, actor.user_id), actor.role)


@router.put("/me", response_model=ProfileRead)
def update_profile(
    body: ProfileUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_user),
):
    profile = profile_for(session, actor.user_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    profile.updated_at = utcnow()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return as_read(profile, actor.role)


@router.put("/{user_id}/role", response_model=ProfileRead)
def set_role(
    user_id: str,
    body: RoleUpdate,
    session: Session = Depends(get_session),
    actor: Actor = Depends(require_role(AppRole.admin)),
):
    assigned = session.exec(select(UserRole).where(UserRole.user_id == user_id)).first()
    if assigned is None:
        assigned = UserRole(user_id=user_id)
    assigned.role = AppRole(body.role)
    session.add(assigned)
    session.commit()
    return as_read(profile_for(session, user_id), assigned.role)
