"""Pure domain services: state machine, SLA, workload, reconciliation, forecasting."""
from .forecasting import RevenueForecaster, RevenueForecast
from .reconciliation import PaymentReconciler, ReconciliationResult, Discrepancy
from .sla import SLATracker
from .state_machine import (
    ALLOWED_TRANSITIONS,
    Actor,
    DeliveryFeeSchedule,
    OrderStateMachine,
    is_valid_transition,
)
from .workload import KitchenWorkload, KitchenWorkloadEstimator

__all__ = [
    "ALLOWED_TRANSITIONS",
    "Actor",
    "DeliveryFeeSchedule",
    "Discrepancy",
    "KitchenWorkload",
    "KitchenWorkloadEstimator",
    "OrderStateMachine",
    "PaymentReconciler",
    "ReconciliationResult",
    "RevenueForecast",
    "RevenueForecaster",
    "SLATracker",
    "is_valid_transition",
]
