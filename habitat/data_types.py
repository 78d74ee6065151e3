"""
Data types mirroring YAML schema structures.

These dataclasses are populated by loader.py from YAML files, or built
directly in code. The engine only consumes these in-memory values.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional

from .constants import (
    PLANT_FOOD_VALUE,
    PREY_FOOD_VALUE,
    DISEASE_DURATION_DAYS,
    DISEASE_MORTALITY_RATE,
    RECOVERED_IMMUNE,
    MUTATION_PROBABILITY,
    PARENT_BIAS_DEFAULT,
    PREDATOR_CREATION_PROBABILITY,
    PREY_CREATION_PROBABILITY,
    INITIAL_INFECTION_PROBABILITY,
    DEFAULT_PREDATOR_WEIGHTS,
    DEFAULT_PREY_WEIGHTS,
    FALLBACK_PREDATOR,
    FALLBACK_PREY,
)


# ============================================================================
# Grid Location
# ============================================================================

@dataclass(frozen=True)
class Location:
    """Immutable (row, col) cell coordinate"""
    row: int
    col: int

    def to_list(self) -> List[int]:
        return [self.row, self.col]


# ============================================================================
# Species Definition
# ============================================================================

FEEDING_STRATEGIES = ('hunt', 'graze', 'hunt_then_graze')
SPECIES_ROLES = ('predator', 'prey')


@dataclass
class FeedingConfig:
    """Feeding strategy for a species"""
    strategy: str  # hunt, graze, hunt_then_graze
    prey_young: List[str] = field(default_factory=list)  # Hunt order while below breeding age
    prey_adult: List[str] = field(default_factory=list)  # Hunt order once of breeding age
    hunt_probability: float = 1.0  # Only used by hunt_then_graze

    def prey_order(self, young: bool) -> List[str]:
        """Prey species ids in priority order for the animal's life stage"""
        return self.prey_young if young else self.prey_adult


@dataclass
class SpeciesDefinition:
    """Complete species definition"""
    species_id: str
    name: str
    role: str  # predator, prey
    feeding: FeedingConfig
    icon: str = ""
    colour: str = "#000000"
    description: Optional[str] = None

    @property
    def is_predator(self) -> bool:
        return self.role == 'predator'


# ============================================================================
# Simulation Configuration
# ============================================================================

@dataclass
class SimulationConfig:
    """
    Configuration surface consumed by the engine.

    Passed explicitly to the driver and factory; there is no global state.
    """
    # Feeding
    plant_food_value: float = PLANT_FOOD_VALUE
    prey_food_value: float = PREY_FOOD_VALUE

    # Disease
    disease_duration: int = DISEASE_DURATION_DAYS
    mortality_rate: float = DISEASE_MORTALITY_RATE
    recovered_immune: bool = RECOVERED_IMMUNE
    initial_infection_probability: float = INITIAL_INFECTION_PROBABILITY

    # Genetics
    mutation_probability: float = MUTATION_PROBABILITY
    active_attributes: Dict[str, bool] = field(default_factory=dict)  # {attribute: enabled}, missing = enabled
    blend_inheritance: bool = False
    parent_bias: float = PARENT_BIAS_DEFAULT

    # Population seeding
    predator_creation_probability: float = PREDATOR_CREATION_PROBABILITY
    prey_creation_probability: float = PREY_CREATION_PROBABILITY
    predator_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PREDATOR_WEIGHTS))
    prey_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PREY_WEIGHTS))
    fallback_predator: str = FALLBACK_PREDATOR
    fallback_prey: str = FALLBACK_PREY

    seed: Optional[int] = None

    def food_value_for(self, species: SpeciesDefinition) -> float:
        """Food level a newborn of this species starts with"""
        return self.prey_food_value if species.is_predator else self.plant_food_value
