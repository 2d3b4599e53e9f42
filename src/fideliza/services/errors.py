"""Typed, user-displayable failures raised by the loyalty core."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


class LoyaltyRuleViolation(Exception):
    """Raised when loyalty business rules are violated."""

    code = "rule_violation"
    status_code = 400

    def __init__(self, detail: str, status_code: Optional[int] = None, **extra: Any) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def as_detail(self) -> dict[str, Any]:
        payload = {"code": self.code, "message": self.detail}
        for key, value in self.extra.items():
            payload[key] = value.isoformat() if isinstance(value, datetime) else value
        return payload


class NotFound(LoyaltyRuleViolation):
    code = "not_found"
    status_code = 404


class StoreNotFound(NotFound):
    pass


class CustomerNotFound(NotFound):
    pass


class RewardNotFound(NotFound):
    pass


class RedemptionNotFound(NotFound):
    pass


class TenantMismatch(LoyaltyRuleViolation):
    code = "tenant_mismatch"
    status_code = 403


class InsufficientPoints(LoyaltyRuleViolation):
    code = "insufficient_points"

    def __init__(self, *, required: int, available: int) -> None:
        super().__init__(
            f"Insufficient points: {required} required, {available} available.",
            required=required,
            available=available,
        )
        self.required = required
        self.available = available


class RedemptionLimitReached(LoyaltyRuleViolation):
    code = "redemption_limit_reached"


class DuplicatePendingRedemption(LoyaltyRuleViolation):
    code = "duplicate_pending_redemption"


class RewardExpired(LoyaltyRuleViolation):
    code = "reward_expired"


class CodeNotFound(LoyaltyRuleViolation):
    code = "code_not_found"
    status_code = 404


class AlreadyUsed(LoyaltyRuleViolation):
    code = "already_used"

    def __init__(self, *, completed_at: Optional[datetime]) -> None:
        super().__init__("This code has already been used.", completed_at=completed_at)
        self.completed_at = completed_at


class Cancelled(LoyaltyRuleViolation):
    code = "cancelled"


class ConcurrentUpdate(LoyaltyRuleViolation):
    code = "concurrent_update"
    status_code = 409


class CodeGenerationFailed(LoyaltyRuleViolation):
    code = "code_generation_failed"
    status_code = 500


class DuplicateCustomer(LoyaltyRuleViolation):
    code = "duplicate_customer"


class InvalidReward(LoyaltyRuleViolation):
    code = "invalid_reward"
