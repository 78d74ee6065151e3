"""
Organism runtime representation.

Organisms occupy field cells. Plants are passive; animals carry age, hunger,
gender, genetics and disease. Species behaviour is data (SpeciesDefinition),
so a single Animal type covers every species.
"""

from dataclasses import dataclass, field
from typing import Optional

from .data_types import Location
from .disease import Disease
from .genetics import Genetics


class Organism:
    """Common base for field occupants (location + alive flag)"""
    location: Optional[Location]
    alive: bool

    @property
    def is_animal(self) -> bool:
        return False

    def set_dead(self):
        """Mark dead. Removal from the field is the Field's job."""
        self.alive = False


@dataclass(eq=False)
class Plant(Organism):
    """
    Passive organism, consumed whole when grazed.

    Attributes:
        location: Cell occupied (None once consumed)
        alive: False once grazed or displaced
    """
    location: Optional[Location] = None
    alive: bool = True

    def to_dict(self) -> dict:
        return {
            'kind': 'plant',
            'location': self.location.to_list() if self.location else None,
            'alive': self.alive,
        }


@dataclass(eq=False)
class Animal(Organism):
    """
    Runtime animal in simulation.

    Attributes:
        instance_id: Unique identifier (format: "{species_id}-{index:05d}")
        species_id: Species definition ID (e.g., "tiger")
        genetics: Heritable life parameters
        is_male: Gender (females reproduce)
        age: Days lived (0 for newborns)
        food_level: Remaining food, may go negative before the starvation check
        disease: Infection state
        location: Cell occupied (None before placement and after death)
        alive: False after any death
    """
    instance_id: str
    species_id: str
    genetics: Genetics
    is_male: bool
    age: int = 0
    food_level: float = 0.0
    disease: Disease = field(default_factory=Disease)
    location: Optional[Location] = None
    alive: bool = True

    @property
    def is_animal(self) -> bool:
        return True

    @property
    def is_young(self) -> bool:
        """Below breeding age"""
        return self.age < self.genetics.breeding_age

    def set_dead(self):
        """Dead animals never stay infected"""
        self.alive = False
        self.disease.clear()

    def is_same_species(self, other: 'Animal') -> bool:
        return other.species_id == self.species_id

    def to_dict(self) -> dict:
        """
        Serialize animal to JSON-compatible dict.

        Returns:
            Dict with all animal fields
        """
        return {
            'kind': 'animal',
            'instance_id': self.instance_id,
            'species_id': self.species_id,
            'location': self.location.to_list() if self.location else None,
            'alive': self.alive,
            'age': self.age,
            'food_level': float(self.food_level),
            'is_male': self.is_male,
            'genes': self.genetics.encode(),
            'genetics': self.genetics.to_dict(),
            'disease': self.disease.to_dict(),
        }
