"""Referral ledger.

Signup bonus system: the referrer gets a fixed number of points when someone
signs up with their code.
"""

from spinrewards.referral.models import ReferralRecord
from spinrewards.referral.service import ReferralListing, ReferralService, referral_service

__all__ = ["ReferralRecord", "ReferralListing", "ReferralService", "referral_service"]
