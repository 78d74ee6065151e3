"""
Spatial field for habitat simulation.

Rectangular grid of cells, each holding at most one organism. Provides the
8-neighbour Moore neighbourhood (edge-clipped, no wraparound) and occupancy
queries. Every neighbourhood query is shuffled on each call: feeding, mating
and movement take the "first match" and rely on this for random tie-breaking.
"""

import numpy as np
from typing import Iterator, List, Optional

from .data_types import Location
from .entity import Organism, Animal, Plant
from .rng import make_rng, shuffled


class OccupiedCellError(Exception):
    """Raised when placing onto a cell held by another live animal"""
    pass


# Moore neighbourhood offsets (excludes the centre cell)
NEIGHBOUR_OFFSETS = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]


class Field:
    """
    height x width grid of optional organism references.

    Invariant: no two organisms share a cell, and every placed organism's
    location matches the cell that holds it.
    """

    def __init__(self, height: int, width: int, rng: Optional[np.random.Generator] = None):
        """
        Args:
            height: Number of rows
            width: Number of columns
            rng: Shared simulation RNG (fresh unseeded generator if None)
        """
        if height <= 0 or width <= 0:
            raise ValueError(f"Field dimensions must be positive, got {height}x{width}")

        self.height = height
        self.width = width
        self.rng = rng if rng is not None else make_rng()
        self._grid = np.empty((height, width), dtype=object)

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    def in_bounds(self, location: Location) -> bool:
        return 0 <= location.row < self.height and 0 <= location.col < self.width

    def _check_bounds(self, location: Location):
        if location is None or not self.in_bounds(location):
            raise ValueError(f"Location {location} outside field {self.height}x{self.width}")

    def organism_at(self, location: Location) -> Optional[Organism]:
        self._check_bounds(location)
        return self._grid[location.row, location.col]

    def animal_at(self, location: Location) -> Optional[Animal]:
        organism = self.organism_at(location)
        return organism if isinstance(organism, Animal) else None

    def plant_at(self, location: Location) -> Optional[Plant]:
        organism = self.organism_at(location)
        return organism if isinstance(organism, Plant) else None

    def place(self, organism: Organism, location: Location):
        """
        Put organism into a cell.

        A plant already in the cell is displaced (dead, detached). A live
        animal already in the cell is never overwritten.

        Raises:
            OccupiedCellError: Cell holds another live animal
        """
        self._check_bounds(location)
        occupant = self._grid[location.row, location.col]

        if occupant is not None and occupant is not organism:
            if isinstance(occupant, Animal) and occupant.alive:
                raise OccupiedCellError(
                    f"Cell ({location.row}, {location.col}) already holds {occupant.instance_id}"
                )
            occupant.set_dead()
            occupant.location = None

        self._grid[location.row, location.col] = organism
        organism.location = location

    def remove(self, location: Location) -> Optional[Organism]:
        """
        Vacate a cell.

        Returns:
            The organism that was there (its location cleared), or None
        """
        self._check_bounds(location)
        occupant = self._grid[location.row, location.col]
        self._grid[location.row, location.col] = None
        if occupant is not None:
            occupant.location = None
        return occupant

    def move(self, organism: Organism, location: Location):
        """Vacate the organism's cell and occupy the new one"""
        if organism.location is not None and self.organism_at(organism.location) is organism:
            self.remove(organism.location)
        self.place(organism, location)

    def kill(self, organism: Organism):
        """Mark organism dead and vacate its cell (no plant replacement)"""
        organism.set_dead()
        if organism.location is not None and self.organism_at(organism.location) is organism:
            self.remove(organism.location)

    def replace_dead_with_plant(self, location: Location) -> Plant:
        """
        Put a fresh plant where an animal just died.

        Returns:
            The new plant
        """
        occupant = self.remove(location)
        if occupant is not None and occupant.alive:
            occupant.set_dead()
        plant = Plant()
        self.place(plant, location)
        return plant

    def clear(self):
        """Empty every cell"""
        for organism in self.organisms():
            organism.location = None
        self._grid[:, :] = None

    # ------------------------------------------------------------------
    # Neighbourhood queries (shuffled on every call)
    # ------------------------------------------------------------------

    def adjacent(self, location: Location) -> List[Location]:
        """
        In-bounds neighbours of location, excluding location itself.

        Returns:
            Shuffled list of up to 8 locations
        """
        self._check_bounds(location)
        locations = []
        for d_row, d_col in NEIGHBOUR_OFFSETS:
            row = location.row + d_row
            col = location.col + d_col
            if 0 <= row < self.height and 0 <= col < self.width:
                locations.append(Location(row, col))

        return shuffled(self.rng, locations)

    def free_adjacent(self, location: Location) -> List[Location]:
        """Shuffled neighbours not holding an animal (plants count as free)"""
        return [loc for loc in self.adjacent(location)
                if not isinstance(self._grid[loc.row, loc.col], Animal)]

    def free_adjacent_location(self, location: Location) -> Optional[Location]:
        free = self.free_adjacent(location)
        return free[0] if free else None

    def living_neighbour_animals(self, location: Location) -> List[Animal]:
        """Shuffled live animals in the Moore neighbourhood"""
        neighbours = []
        for loc in self.adjacent(location):
            organism = self._grid[loc.row, loc.col]
            if isinstance(organism, Animal) and organism.alive:
                neighbours.append(organism)
        return neighbours

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def organisms(self) -> Iterator[Organism]:
        """Occupants in row-major order"""
        for row in range(self.height):
            for col in range(self.width):
                organism = self._grid[row, col]
                if organism is not None:
                    yield organism

    def animals(self) -> Iterator[Animal]:
        for organism in self.organisms():
            if isinstance(organism, Animal):
                yield organism

    def plants(self) -> Iterator[Plant]:
        for organism in self.organisms():
            if isinstance(organism, Plant):
                yield organism

    def occupied_count(self) -> int:
        return sum(1 for _ in self.organisms())
