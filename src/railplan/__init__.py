"""
railplan

Minimum-makespan delivery planning for capacity-constrained trains moving
packages across a network of stations joined by timed routes.
"""

from .config import Parameters
from .exceptions import (
    RailPlanError,
    UnknownStationError,
    NoFeasiblePlanError,
    SearchBudgetExceededError,
    InstanceTooLargeError,
)
from .network import Station, Route, Package, Train, Network, DeliveryProblem
from .routing import TravelTimeTable, UNREACHABLE
from .optimization import Plan, PlanStep, DeliverySolution, solve_delivery_problem, validate_plan

__version__ = "0.1.0"

__all__ = [
    'Parameters',
    'RailPlanError',
    'UnknownStationError',
    'NoFeasiblePlanError',
    'SearchBudgetExceededError',
    'InstanceTooLargeError',
    'Station',
    'Route',
    'Package',
    'Train',
    'Network',
    'DeliveryProblem',
    'TravelTimeTable',
    'UNREACHABLE',
    'Plan',
    'PlanStep',
    'DeliverySolution',
    'solve_delivery_problem',
    'validate_plan'
]
