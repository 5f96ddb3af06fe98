"""Profile photo URLs from the public storage bucket"""

from typing import Optional

from ..config import DEFAULT_AVATAR_URL, PROFILE_PHOTO_BASE_URL


def get_profile_photo_url(profile_photo_path: Optional[str]) -> str:
    """Public URL for a stored photo path, or the default avatar"""
    if not profile_photo_path:
        return DEFAULT_AVATAR_URL
    if profile_photo_path.startswith(("http://", "https://")):
        return profile_photo_path
    return f"{PROFILE_PHOTO_BASE_URL.rstrip('/')}/{profile_photo_path.lstrip('/')}"
