"""
Habitat simulation driver.

Owns the field, the animal list and the RNG, and advances the world one day
at a time. Pacing, stopping and rendering belong to the caller.
"""

import os
import time
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional

from .constants import DEATH_CAUSES, DEFAULT_FIELD_HEIGHT, DEFAULT_FIELD_WIDTH, STEP_TIME_WINDOW
from .data_types import SimulationConfig, SpeciesDefinition
from .entity import Animal
from .field import Field
from .genetics import AttributeRegistry
from .lifecycle import StepContext, act
from .loader import load_all_data
from .population import OrganismFactory, populate
from .rng import make_rng
from .stats import count_infected, count_population, is_viable, summarize


def new_field(height: int, width: int, rng: Optional[np.random.Generator] = None) -> Field:
    """Empty field of the given size"""
    return Field(height, width, rng)


class HabitatSimulation:
    """
    Main simulation class for the habitat ecosystem.

    Every live animal acts once per step in list order; animals killed earlier
    in the same step (eaten) are skipped. Newborns join the list after all
    turns and act from the next step.
    """

    def __init__(
        self,
        config: SimulationConfig,
        species_registry: Dict[str, SpeciesDefinition],
        height: int = DEFAULT_FIELD_HEIGHT,
        width: int = DEFAULT_FIELD_WIDTH,
        seed: Optional[int] = None
    ):
        """
        Initialize and populate a new habitat.

        Args:
            config: Simulation configuration
            species_registry: {species_id: SpeciesDefinition}
            height: Field rows
            width: Field columns
            seed: RNG seed (falls back to config.seed, None = unseeded)
        """
        self.config = config
        self.species_registry = species_registry
        self.seed = seed if seed is not None else config.seed

        self.rng = make_rng(self.seed)
        self.attribute_registry = AttributeRegistry.from_config(config)
        self.field = new_field(height, width, self.rng)
        self.factory = OrganismFactory(species_registry, self.attribute_registry, config, self.rng)
        self._context = StepContext(
            field=self.field,
            config=config,
            species_registry=species_registry,
            factory=self.factory,
            rng=self.rng,
        )

        # Simulation state
        self.animals: List[Animal] = []
        self.step_count: int = 0

        # Performance metrics
        self._step_times: List[float] = []
        self._step_time_sum: float = 0.0
        self._step_time_window: int = STEP_TIME_WINDOW

        # Telemetry
        self._births_last_step: int = 0
        self._deaths_last_step: Dict[str, int] = {}
        self._total_births: int = 0
        self._total_deaths: Dict[str, int] = {cause: 0 for cause in DEATH_CAUSES}

        self.reset()

        print(f"[OK] Habitat initialized: {len(self.animals)} animals on "
              f"{height}x{width} field, seed={self.seed}")

    @classmethod
    def from_data_pack(
        cls,
        data_root: Path,
        schema_dir: Optional[Path] = None,
        height: int = DEFAULT_FIELD_HEIGHT,
        width: int = DEFAULT_FIELD_WIDTH,
        seed: Optional[int] = None
    ) -> 'HabitatSimulation':
        """
        Build simulation from a data pack directory.

        Args:
            data_root: Directory holding habitat.yaml and species/
            schema_dir: Optional path to JSON schemas
        """
        print("Loading data pack...")
        data = load_all_data(data_root, schema_dir)
        print(f"  Species: {', '.join(sorted(data['species']))}")
        return cls(data['config'], data['species'], height=height, width=width, seed=seed)

    def reset(self):
        """Clear the field and telemetry, then repopulate"""
        self.step_count = 0
        self.animals = populate(self.field, self.factory, self.config)

        self._step_times = []
        self._step_time_sum = 0.0
        self._births_last_step = 0
        self._deaths_last_step = {}
        self._total_births = 0
        self._total_deaths = {cause: 0 for cause in DEATH_CAUSES}

    def step(self) -> List[Animal]:
        """
        Advance simulation by one day.

        Returns:
            Newborns placed during this step (still alive at its end)
        """
        start_time = time.perf_counter()
        self.step_count += 1

        newborns: List[Animal] = []
        deaths = {cause: 0 for cause in DEATH_CAUSES}
        acted_deaths = set()

        for animal in self.animals:
            if not animal.alive:
                continue
            cause = act(animal, self._context, newborns)
            if cause is not None:
                deaths[cause] += 1
                acted_deaths.add(id(animal))

        # Anything dead that did not die on its own turn was eaten
        for animal in self.animals + newborns:
            if not animal.alive and id(animal) not in acted_deaths:
                deaths['eaten'] += 1

        survivors = [baby for baby in newborns if baby.alive]
        self.animals = [a for a in self.animals if a.alive] + survivors

        self._births_last_step = len(newborns)
        self._deaths_last_step = deaths
        self._total_births += len(newborns)
        for cause, count in deaths.items():
            self._total_deaths[cause] += count

        self._record_step_time(time.perf_counter() - start_time)

        if os.getenv('HABITAT_DEBUG_INVARIANTS') == '1':
            self._check_invariants()

        return survivors

    def _check_invariants(self):
        """Every live animal sits in the cell it believes it occupies"""
        for animal in self.animals:
            assert animal.location is not None, f"{animal.instance_id} alive without location"
            assert self.field.organism_at(animal.location) is animal, \
                f"{animal.instance_id} not found at {animal.location}"
        assert sum(1 for _ in self.field.animals()) == len(self.animals), \
            "Field animal count differs from animal list"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def population_counts(self) -> Dict[str, int]:
        return count_population(self.field)

    def infected_counts(self) -> Dict[str, int]:
        return count_infected(self.field)

    def is_viable(self) -> bool:
        return is_viable(self.field)

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def _record_step_time(self, elapsed: float):
        """
        Record step timing for rolling average.

        Args:
            elapsed: Step time in seconds
        """
        self._step_times.append(elapsed)
        self._step_time_sum += elapsed

        if len(self._step_times) > self._step_time_window:
            removed = self._step_times.pop(0)
            self._step_time_sum -= removed

    def get_step_stats(self) -> dict:
        """
        Get current step statistics.

        Returns:
            Dict with step_count, timing (ms), births and deaths per cause
            for the last step and in total
        """
        if self._step_times:
            avg_time = self._step_time_sum / len(self._step_times)
            last_time = self._step_times[-1]
        else:
            avg_time = 0.0
            last_time = 0.0

        return {
            'step_count': self.step_count,
            'avg_step_time_ms': avg_time * 1000.0,
            'last_step_time_ms': last_time * 1000.0,
            'animal_count': len(self.animals),
            'births': self._births_last_step,
            'deaths': dict(self._deaths_last_step),
            'total_births': self._total_births,
            'total_deaths': dict(self._total_deaths),
        }

    def get_snapshot(self) -> dict:
        """
        Get complete simulation state snapshot.

        Returns:
            Dict with step_count, field size, counts, animals, timing
        """
        return {
            'step_count': self.step_count,
            'seed': self.seed,
            'field': {'height': self.field.height, 'width': self.field.width},
            'population': self.population_counts(),
            'infected': self.infected_counts(),
            'animal_count': len(self.animals),
            'animals': [a.to_dict() for a in self.animals],
            'stats': self.get_step_stats()
        }

    def print_step_summary(self):
        """Print step summary to console (lightweight monitoring)"""
        stats = self.get_step_stats()
        deaths = sum(stats['deaths'].values())
        print(f"Step {stats['step_count']:5d} | "
              f"Avg: {stats['avg_step_time_ms']:6.3f} ms | "
              f"Births: {stats['births']:3d} | Deaths: {deaths:3d} | "
              f"{summarize(self.field)}")
