"""
network module

Data model for the rail network: stations, routes, packages, trains, and the
validated problem instance handed to the planner.
"""

from .models import Station, Route, Package, Train
from .graph import Network
from .problem import DeliveryProblem

__all__ = [
    'Station',
    'Route',
    'Package',
    'Train',
    'Network',
    'DeliveryProblem'
]
