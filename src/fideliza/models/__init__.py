"""SQLAlchemy models for Fideliza."""

from .customer import DEFAULT_CUSTOMER_NAME, Customer
from .point_transaction import PointTransaction, PointTransactionType
from .redemption import Redemption, RedemptionStatus
from .reward import Reward, RewardCategory, RewardType
from .store import Store

__all__ = [
    "Customer",
    "DEFAULT_CUSTOMER_NAME",
    "PointTransaction",
    "PointTransactionType",
    "Redemption",
    "RedemptionStatus",
    "Reward",
    "RewardCategory",
    "RewardType",
    "Store",
]
