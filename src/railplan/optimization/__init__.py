"""
optimization module

Action catalogue, uniform-cost delivery search and plan extraction.
"""

from .actions import Action, build_action_catalogue, pickups_at, dropoffs_at
from .search import (
    DeliverySearch,
    SearchResult,
    SearchState,
    Transition,
    search_delivery_plan,
)
from .plan import Plan, PlanStep, RouteLeg, extract_plan, validate_plan
from .core import DeliverySolution, solve_delivery_problem

__all__ = [
    'Action',
    'build_action_catalogue',
    'pickups_at',
    'dropoffs_at',
    'DeliverySearch',
    'SearchResult',
    'SearchState',
    'Transition',
    'search_delivery_plan',
    'Plan',
    'PlanStep',
    'RouteLeg',
    'extract_plan',
    'validate_plan',
    'DeliverySolution',
    'solve_delivery_problem'
]
