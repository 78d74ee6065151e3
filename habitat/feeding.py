"""
Feeding strategies for habitat animals.

hunt and graze are free functions over the field and the feeding animal.
Species differ only by their FeedingConfig (strategy name, prey priority
lists for young and adult animals, hunt probability), dispatched by
find_food().
"""

import numpy as np
from typing import List, Optional

from .data_types import Location, SimulationConfig, SpeciesDefinition
from .entity import Animal, Plant
from .field import Field
from .rng import chance


def hunt(animal: Animal, field: Field, prey_types: List[str], food_value: float) -> Optional[Location]:
    """
    Kill the highest-priority prey found in an adjacent cell.

    For each prey species in order, scans the shuffled neighbourhood; the
    first live match is killed and its cell vacated.

    Args:
        animal: Hunter
        field: Simulation field
        prey_types: Prey species ids in priority order
        food_value: Hunter's food level after eating

    Returns:
        Location of the eaten prey, or None if nothing was caught
    """
    adjacent = field.adjacent(animal.location)

    for prey_type in prey_types:
        for where in adjacent:
            prey = field.animal_at(where)
            if prey is None or prey is animal:
                continue
            if prey.species_id == prey_type and prey.alive:
                field.kill(prey)
                animal.food_level = food_value
                return where

    return None


def graze(animal: Animal, field: Field, food_value: float) -> Optional[Location]:
    """
    Consume the first plant found in an adjacent cell.

    Args:
        animal: Grazer
        field: Simulation field
        food_value: Grazer's food level after eating

    Returns:
        Location of the consumed plant, or None
    """
    for where in field.adjacent(animal.location):
        plant = field.organism_at(where)
        if isinstance(plant, Plant):
            field.kill(plant)
            animal.food_level = food_value
            return where

    return None


def find_food(
    animal: Animal,
    species: SpeciesDefinition,
    field: Field,
    config: SimulationConfig,
    rng: np.random.Generator
) -> Optional[Location]:
    """
    Run the species feeding strategy.

    Supported strategies:
    - hunt: prey list for the animal's life stage
    - graze: adjacent plants
    - hunt_then_graze: hunt with hunt_probability, graze if nothing caught

    Returns:
        Location of the food eaten, or None
    """
    feeding = species.feeding
    strategy = feeding.strategy

    if strategy == 'hunt':
        return hunt(animal, field, feeding.prey_order(animal.is_young), config.prey_food_value)

    if strategy == 'graze':
        return graze(animal, field, config.plant_food_value)

    if strategy == 'hunt_then_graze':
        if chance(rng, feeding.hunt_probability):
            caught = hunt(animal, field, feeding.prey_order(animal.is_young), config.prey_food_value)
            if caught is not None:
                return caught
        return graze(animal, field, config.plant_food_value)

    raise ValueError(f"Unknown feeding strategy '{strategy}' for species {species.species_id}")
