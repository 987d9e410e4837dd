"""Error types raised by the planner.

Input problems are detected while the problem is assembled, before any search
runs; planning problems are raised by the search itself.
"""


class RailPlanError(Exception):
    """Base class for all planner errors."""


class UnknownStationError(RailPlanError, KeyError):
    """A route, package or train references a station that was never declared."""

    def __init__(self, station_name: str, referenced_by: str = None):
        self.station_name = station_name
        self.referenced_by = referenced_by
        message = f"station not found: {station_name}"
        if referenced_by:
            message += f" (referenced by {referenced_by})"
        super().__init__(message)

    def __str__(self):
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]


class InstanceTooLargeError(RailPlanError, ValueError):
    """The instance exceeds one of the configured size limits."""


class NoFeasiblePlanError(RailPlanError):
    """No sequence of actions delivers every package."""


class SearchBudgetExceededError(RailPlanError):
    """The search hit its configured state or time budget before finishing."""

    def __init__(self, message: str, expanded: int = 0, elapsed_sec: float = 0.0):
        super().__init__(message)
        self.expanded = expanded
        self.elapsed_sec = elapsed_sec
