"""Scheduling engine (time utilities, constraints, availability, placement, series).

Import the submodules directly, e.g. ``from scheduling.placement import PlacementValidator``.
The models depend on ``scheduling.time_utils``, so nothing is re-exported here.
"""
