"""Business logic services for the forum backend."""

from .quota import QuotaDecision, can_create_post, enforce_post_quota
from .settlement import PaymentConfirmation, SettlementResult, settle_payment
from .votes import VoteOutcome, apply_vote

__all__ = [
    "PaymentConfirmation",
    "QuotaDecision",
    "SettlementResult",
    "VoteOutcome",
    "apply_vote",
    "can_create_post",
    "enforce_post_quota",
    "settle_payment",
]
