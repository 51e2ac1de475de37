"""Kitchen workload classification."""
from enum import Enum


class WorkloadLevel(str, Enum):
    """Coarse kitchen queue pressure."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
