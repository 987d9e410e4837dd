"""Shared enumerations used across the planner."""
from enum import Enum


class ActionKind(Enum):
    """What a train does at a plan step."""
    MOVE_TO = "move-to"
    PICK_UP = "pick-up"
    DROP_OFF = "drop-off"


class PackageStatus(Enum):
    """Lifecycle of a package: pending -> loaded -> delivered."""
    PENDING = "pending"
    LOADED = "loaded"
    DELIVERED = "delivered"


class OutputFormat(Enum):
    """File formats supported when saving a plan."""
    EXCEL = "excel"
    JSON = "json"
