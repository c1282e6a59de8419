from dataclasses import dataclass

from ..application.services.access_service import AccessService
from ..application.services.account_service import AccountService
from ..application.services.geography_service import GeographyService
from ..application.services.user_directory_service import UserDirectoryService
from ..domain.ports.persistence import PersistenceGateway
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    account_service: AccountService
    access_service: AccessService
    user_directory_service: UserDirectoryService
    geography_service: GeographyService
