"""
routing module

Shortest travel times between stations, computed once per problem and shared
read-only by the delivery search.
"""

from .travel_times import TravelTimeTable, UNREACHABLE, dijkstra

__all__ = [
    'TravelTimeTable',
    'UNREACHABLE',
    'dijkstra'
]
