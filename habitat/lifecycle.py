"""
Animal lifecycle: one simulated day for one animal.

Fixed step order, each step able to end the turn on death:
1. Age (old age death)
2. Hunger (starvation death)
3. Reproduction (females only)
4. Disease (progress and resolve, or catch from an infected neighbour)
5. Food seeking, falling back to any free adjacent cell
6. Disease death decided in step 4 (pre-empts movement)
7. Move, or die of overcrowding when no cell is available

Every death except being eaten leaves a fresh plant in the animal's cell.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional

from .data_types import SimulationConfig, SpeciesDefinition
from .entity import Animal
from .feeding import find_food
from .field import Field
from .genetics import Genetics
from .population import OrganismFactory
from .rng import chance, random_int


@dataclass
class StepContext:
    """Collaborators shared by every animal turn in a step"""
    field: Field
    config: SimulationConfig
    species_registry: Dict[str, SpeciesDefinition]
    factory: OrganismFactory
    rng: np.random.Generator


def act(animal: Animal, ctx: StepContext, newborns: List[Animal]) -> Optional[str]:
    """
    Run one day for a live animal.

    Args:
        animal: Animal taking its turn
        ctx: Step collaborators
        newborns: Receives babies born this turn

    Returns:
        Cause of death ('old_age', 'starvation', 'disease', 'overcrowding'),
        or None if the animal survived the day
    """
    field = ctx.field
    genetics = animal.genetics

    # 1. Age
    animal.age += 1
    if animal.age > genetics.max_age:
        _die(animal, field)
        return 'old_age'

    # 2. Hunger
    animal.food_level -= genetics.metabolism
    if animal.food_level <= 0:
        _die(animal, field)
        return 'starvation'

    # 3. Reproduction
    if not animal.is_male:
        give_birth(animal, ctx, newborns)

    # 4. Disease
    dies_of_disease = disease_step(animal, ctx)

    # 5. Food, else any free cell
    species = ctx.species_registry[animal.species_id]
    new_location = find_food(animal, species, field, ctx.config, ctx.rng)
    if new_location is None:
        new_location = field.free_adjacent_location(animal.location)

    # 6. Disease death pre-empts movement
    if dies_of_disease:
        _die(animal, field)
        return 'disease'

    # 7. Move or die of overcrowding
    if new_location is None:
        _die(animal, field)
        return 'overcrowding'

    field.move(animal, new_location)
    return None


def _die(animal: Animal, field: Field):
    """Kill animal and leave a plant in its cell"""
    location = animal.location
    animal.set_dead()
    if location is not None:
        field.replace_dead_with_plant(location)


# ============================================================================
# Disease
# ============================================================================

def exposed_to_infection(animal: Animal, field: Field) -> bool:
    """At least one live same-species neighbour is infected"""
    for neighbour in field.living_neighbour_animals(animal.location):
        if animal.is_same_species(neighbour) and neighbour.disease.infected:
            return True
    return False


def disease_step(animal: Animal, ctx: StepContext) -> bool:
    """
    Progress or catch disease.

    An infected animal gains one day of infection and, once the configured
    duration is reached, either dies (mortality draw) or recovers. A healthy
    animal draws once against its disease probability when exposed.

    Returns:
        True if the infection turned fatal today
    """
    disease = animal.disease
    config = ctx.config

    if disease.infected:
        disease.progress()
        if disease.is_due(config.disease_duration):
            return disease.resolve(ctx.rng, config.mortality_rate, config.recovered_immune)
        return False

    if disease.susceptible and exposed_to_infection(animal, ctx.field):
        disease.try_infect(ctx.rng, animal.genetics.disease_probability)

    return False


# ============================================================================
# Reproduction
# ============================================================================

def find_mating_partner(animal: Animal, field: Field) -> Optional[Animal]:
    """First live neighbour of the same species and opposite gender"""
    for neighbour in field.living_neighbour_animals(animal.location):
        if animal.is_same_species(neighbour) and neighbour.is_male != animal.is_male:
            return neighbour
    return None


def litter_size(animal: Animal, rng: np.random.Generator) -> int:
    """
    Number of babies for one breeding event.

    0 unless the animal has reached breeding age and the breeding draw
    succeeds, otherwise uniform in [1, max_litter_size].
    """
    genetics = animal.genetics
    if animal.age < genetics.breeding_age:
        return 0
    if not chance(rng, genetics.breeding_probability):
        return 0
    return random_int(rng, 1, genetics.max_litter_size)


def shared_genes(mother: Animal, father: Animal, ctx: StepContext) -> Genetics:
    """Combine both parents' genes (simple or blended inheritance)"""
    config = ctx.config
    if config.blend_inheritance:
        return Genetics.breed_blended(mother.genetics, father.genetics, ctx.rng, config.parent_bias)
    return Genetics.breed(mother.genetics, father.genetics, ctx.rng)


def give_birth(animal: Animal, ctx: StepContext, newborns: List[Animal]) -> int:
    """
    Breed with an adjacent partner, placing babies in free adjacent cells.

    Babies share the parents' combined genes, each with its own mutation
    round. Litter is capped by the number of free cells.

    Returns:
        Number of babies born
    """
    field = ctx.field
    partner = find_mating_partner(animal, field)
    if partner is None:
        return 0

    genes = shared_genes(animal, partner, ctx)
    free = field.free_adjacent(animal.location)
    births = min(litter_size(animal, ctx.rng), len(free))

    for location in free[:births]:
        child_genes = genes.copy().mutate(ctx.rng)
        baby = ctx.factory.create_newborn(animal, field, location, child_genes)
        newborns.append(baby)

    return births
