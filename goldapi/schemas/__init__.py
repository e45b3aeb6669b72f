from .auth import LoginRequest, Token
from .user import Actor, User
from .scheme import SchemeResponse
from .user_scheme import UserSchemeResponse
from .transaction import TransactionResponse
from .redemption import RedemptionRequestResponse
from .gold_price import GoldPriceResponse
