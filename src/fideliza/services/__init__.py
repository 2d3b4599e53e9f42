"""Service layer exports."""

from . import (
	customer_service,
	dashboard_service,
	ledger_service,
	redemption_service,
	reward_service,
	tenancy,
)

__all__ = [
	"customer_service",
	"dashboard_service",
	"ledger_service",
	"redemption_service",
	"reward_service",
	"tenancy",
]
