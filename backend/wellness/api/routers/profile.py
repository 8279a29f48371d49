from fastapi import APIRouter, Depends, HTTPException, status

from wellness.api.deps import get_storage
from wellness.models import User
from wellness.schemas import PreferencesUpdate, ProfileUpdate, UserProfile
from wellness.services.auth_service import get_current_user
from wellness.services.dashboard_storage import DashboardStorage, StorageError

router = APIRouter(prefix="/profile", tags=["profile"])

def _account_defaults(user: User) -> UserProfile:
    # until the profile is edited, show what the account was registered with
    return UserProfile(name=user.name or "", email=user.email)

@router.get("", response_model=UserProfile)
async def get_profile(
    current_user: User = Depends(get_current_user),
    storage: DashboardStorage = Depends(get_storage),
):
    try:
        return await storage.get_profile(_account_defaults(current_user))
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not load profile data")

@router.put("", response_model=UserProfile)
async def update_profile(
    req: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    storage: DashboardStorage = Depends(get_storage),
):
    try:
        profile = await storage.save_profile(req, _account_defaults(current_user))
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to save profile")
    await storage.record_event("EditProfile", "saveProfile")
    return profile

@router.patch("/preferences", response_model=UserProfile)
async def update_preferences(
    req: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    storage: DashboardStorage = Depends(get_storage),
):
    """Notification and privacy switches, avatar image URI. Omitted fields stay as they are."""
    try:
        return await storage.save_preferences(req, _account_defaults(current_user))
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to save preferences")
