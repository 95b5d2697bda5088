"""API router for self-service profiles and public profile lookups."""

from fastapi import APIRouter, Depends, File, UploadFile

from ....application.services.profile_service import ProfileService
from ....core.dependencies import get_phone_normalizer, get_profile_service
from ....domain.models import Account
from ....services.phone_normalizer import PhoneNormalizer
from ....services.token_service import AccessClaims
from ..dependencies import get_current_account, require_verified_email
from ..schemas.accounts import AccountResponse, PublicProfileResponse
from ..schemas.auth import AccountEnvelope
from ..schemas.users import ProfileEnvelope, ProfileUpdateRequest

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=AccountEnvelope)
def get_my_profile(
    account: Account = Depends(get_current_account),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountEnvelope:
    return AccountEnvelope(message="Profile loaded", user=AccountResponse.from_account(account, phone))


@router.put("/me", response_model=AccountEnvelope)
def update_my_profile(
    request: ProfileUpdateRequest,
    account: Account = Depends(get_current_account),
    profiles: ProfileService = Depends(get_profile_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountEnvelope:
    updated = profiles.update_profile(account, request.model_dump(exclude_unset=True))
    return AccountEnvelope(
        message="Profile updated successfully",
        user=AccountResponse.from_account(updated, phone),
    )


@router.post("/me/photo", response_model=AccountEnvelope)
def upload_my_photo(
    profile_photo: UploadFile = File(...),
    account: Account = Depends(get_current_account),
    profiles: ProfileService = Depends(get_profile_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountEnvelope:
    """Replace the profile photo; the previous image is removed from storage."""
    content = profile_photo.file.read()
    updated = profiles.upload_photo(account, content, profile_photo.content_type or "")
    return AccountEnvelope(
        message="Profile photo updated successfully",
        user=AccountResponse.from_account(updated, phone),
    )


@router.delete("/me/photo", response_model=AccountEnvelope)
def delete_my_photo(
    account: Account = Depends(get_current_account),
    profiles: ProfileService = Depends(get_profile_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountEnvelope:
    updated = profiles.remove_photo(account)
    return AccountEnvelope(
        message="Profile photo removed",
        user=AccountResponse.from_account(updated, phone),
    )


@router.get("/{account_id}", response_model=ProfileEnvelope)
def get_public_profile(
    account_id: int,
    _: AccessClaims = Depends(require_verified_email),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileEnvelope:
    account = profiles.get_profile(account_id)
    return ProfileEnvelope(user=PublicProfileResponse.from_account(account))
