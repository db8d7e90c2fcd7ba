"""Spin ledger."""

from spinrewards.spins.models import SpinEvent
from spinrewards.spins.service import SpinResult, SpinService, day_bounds, spin_service

__all__ = ["SpinEvent", "SpinResult", "SpinService", "day_bounds", "spin_service"]
