"""
Population factory and initial seeding.

Creates plants and animals, draws species from spawn weights and fills an
empty field. Predator weights and prey weights form independent pools.
"""

import numpy as np
from typing import Dict, List, Optional

from .data_types import Location, SimulationConfig, SpeciesDefinition
from .entity import Animal, Plant
from .field import Field
from .genetics import AttributeRegistry, Genetics
from .rng import chance


class UnknownSpeciesError(Exception):
    """Raised when asked to create a species missing from the registry"""
    pass


def choose_species(weights: Dict[str, float], rng: np.random.Generator) -> Optional[str]:
    """
    Weighted random species selection.

    Draws a uniform value in [0, total) and returns the species whose
    cumulative weight interval contains it. Zero and negative weights are
    left out of both the total and the scan.

    Args:
        weights: {species_id: weight}
        rng: Simulation RNG

    Returns:
        Selected species id, or None when the total weight is not positive
    """
    total = sum(weight for weight in weights.values() if weight > 0)
    if total <= 0:
        return None

    value = rng.random() * total
    cumulative = 0.0
    selected = None
    for species_id, weight in weights.items():
        if weight <= 0:
            continue
        cumulative += weight
        selected = species_id
        if value < cumulative:
            return species_id

    # Float rounding at the top of the range
    return selected


class OrganismFactory:
    """
    Instantiates organisms and places them into the field.

    Args:
        species_registry: {species_id: SpeciesDefinition}
        attribute_registry: Genetics attribute registry for this run
        config: Simulation configuration
        rng: Simulation RNG
    """

    def __init__(
        self,
        species_registry: Dict[str, SpeciesDefinition],
        attribute_registry: AttributeRegistry,
        config: SimulationConfig,
        rng: np.random.Generator
    ):
        self.species_registry = species_registry
        self.attribute_registry = attribute_registry
        self.config = config
        self.rng = rng
        self._next_index = 0

    def species(self, species_id: str) -> SpeciesDefinition:
        if species_id not in self.species_registry:
            raise UnknownSpeciesError(f"Unknown species type: {species_id}")
        return self.species_registry[species_id]

    def _instance_id(self, species_id: str) -> str:
        instance_id = f"{species_id}-{self._next_index:05d}"
        self._next_index += 1
        return instance_id

    def create_animal(
        self,
        species_id: str,
        field: Field,
        location: Location,
        genetics: Optional[Genetics] = None,
        first_generation: bool = False
    ) -> Animal:
        """
        Create an animal and place it at location.

        First-generation animals get a random age below their max age, a
        random food level and may start infected. Newborns start at age 0,
        fully fed and healthy.

        Raises:
            UnknownSpeciesError: species_id not registered
        """
        species = self.species(species_id)
        if genetics is None:
            genetics = Genetics.random(self.attribute_registry, self.rng)

        animal = Animal(
            instance_id=self._instance_id(species_id),
            species_id=species_id,
            genetics=genetics,
            is_male=bool(self.rng.random() < 0.5),
        )

        food_value = self.config.food_value_for(species)
        if first_generation:
            animal.age = int(self.rng.integers(max(1, genetics.max_age)))
            animal.food_level = float(self.rng.integers(max(1, int(food_value))))
            if chance(self.rng, self.config.initial_infection_probability):
                animal.disease.infect()
        else:
            animal.age = 0
            animal.food_level = float(food_value)

        field.place(animal, location)
        return animal

    def create_newborn(self, parent: Animal, field: Field, location: Location, genetics: Genetics) -> Animal:
        """Same-species baby (displaces any plant in the cell)"""
        return self.create_animal(parent.species_id, field, location, genetics=genetics)

    def create_random_predator(self, field: Field, location: Location) -> Animal:
        species_id = choose_species(self.config.predator_weights, self.rng)
        if species_id is None:
            print(f"[WARN] Predator weights sum to zero, using {self.config.fallback_predator}")
            species_id = self.config.fallback_predator
        return self.create_animal(species_id, field, location, first_generation=True)

    def create_random_prey(self, field: Field, location: Location) -> Animal:
        species_id = choose_species(self.config.prey_weights, self.rng)
        if species_id is None:
            print(f"[WARN] Prey weights sum to zero, using {self.config.fallback_prey}")
            species_id = self.config.fallback_prey
        return self.create_animal(species_id, field, location, first_generation=True)

    def create_plant(self, field: Field, location: Location) -> Plant:
        plant = Plant()
        field.place(plant, location)
        return plant


def populate(field: Field, factory: OrganismFactory, config: SimulationConfig) -> List[Animal]:
    """
    Seed an empty field.

    Row-major over every cell: draw against the predator creation probability,
    otherwise against the prey creation probability, otherwise plant.

    Args:
        field: Field to fill (cleared first)
        factory: Organism factory (owns the RNG)
        config: Creation probabilities and spawn weights

    Returns:
        Animals created, in placement order
    """
    field.clear()
    rng = factory.rng
    animals = []

    for row in range(field.height):
        for col in range(field.width):
            location = Location(row, col)
            if chance(rng, config.predator_creation_probability):
                animals.append(factory.create_random_predator(field, location))
            elif chance(rng, config.prey_creation_probability):
                animals.append(factory.create_random_prey(field, location))
            else:
                factory.create_plant(field, location)

    return animals
