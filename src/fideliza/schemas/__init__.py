"""Public schema exports."""

from .customer import CustomerCreate, CustomerLogin, CustomerRead, CustomerSession, StoreSummary
from .dashboard import StoreDashboard, StoreStatsRead
from .points import PointsAdjustment, PointsBalance, PointTransactionRead
from .redemption import (
	CancellationReceipt,
	CodeValidation,
	RedemptionCreate,
	RedemptionHistoryItem,
	RedemptionRead,
	RedemptionReceipt,
	ValidatedRedemption,
)
from .reward import RewardCreate, RewardRead, RewardUpdate

__all__ = [
	"CancellationReceipt",
	"CodeValidation",
	"CustomerCreate",
	"CustomerLogin",
	"CustomerRead",
	"CustomerSession",
	"PointTransactionRead",
	"PointsAdjustment",
	"PointsBalance",
	"RedemptionCreate",
	"RedemptionHistoryItem",
	"RedemptionRead",
	"RedemptionReceipt",
	"RewardCreate",
	"RewardRead",
	"RewardUpdate",
	"StoreDashboard",
	"StoreStatsRead",
	"StoreSummary",
	"ValidatedRedemption",
]
