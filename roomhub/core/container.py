from dataclasses import dataclass

from ..application.services.admin_service import AdminService
from ..application.services.profile_service import ProfileService
from .config import Settings
from ..domain.ports.delivery import CodeDelivery, ImageStorage
from ..infrastructure.persistence.sqlite import SQLiteAccountRepository
from ..services.account_service import AccountService
from ..services.one_time_codes import OneTimeCodeEngine
from ..services.password_hasher import CredentialHasher
from ..services.phone_normalizer import PhoneNormalizer
from ..services.token_service import TokenService


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    repository: SQLiteAccountRepository
    hasher: CredentialHasher
    code_engine: OneTimeCodeEngine
    phone_normalizer: PhoneNormalizer
    token_service: TokenService
    account_service: AccountService
    profile_service: ProfileService
    admin_service: AdminService
    email_service: CodeDelivery
    image_storage: ImageStorage
