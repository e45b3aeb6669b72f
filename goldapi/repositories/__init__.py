# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .settings_repository import SettingsRepository
from .gold_price_repository import GoldPriceRepository
from .scheme_repository import SchemeRepository
from .user_repository import AdminRepository, UserRepository
from .user_scheme_repository import UserSchemeRepository
from .transaction_repository import TransactionRepository
from .redemption_repository import RedemptionRepository

__all__ = [
    "BaseRepository",
    "SettingsRepository",
    "GoldPriceRepository",
    "SchemeRepository",
    "AdminRepository",
    "UserRepository",
    "UserSchemeRepository",
    "TransactionRepository",
    "RedemptionRepository",
]
