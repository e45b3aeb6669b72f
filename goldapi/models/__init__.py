from goldapi.models.base import Base
from goldapi.models.settings import Setting
from goldapi.models.gold_price import GoldPrice
from goldapi.models.scheme import Scheme
from goldapi.models.user import Admin, User
from goldapi.models.user_scheme import UserScheme
from goldapi.models.redemption import RedemptionRequest
from goldapi.models.transaction import Transaction
from goldapi.models.scheme_request import SchemeRequest
from goldapi.models.referral import Referral

__all__ = [
    "Base",
    "Setting",
    "GoldPrice",
    "Scheme",
    "Admin",
    "User",
    "UserScheme",
    "RedemptionRequest",
    "Transaction",
    "SchemeRequest",
    "Referral",
]
