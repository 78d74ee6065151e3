"""
Habitat Simulation

A deterministic, headless grid ecosystem: plants and animals age, feed,
breed, mutate, sicken and die over successive simulated days.

Architecture: the engine owns the field. Renderers and control panels are consumers.
"""

__version__ = "0.1.0"
