"""
Per-animal disease state machine.

Healthy -> Infected -> {Recovered | Dead}. Duration and mortality rate are
simulation-wide configuration; each animal owns only its infection state.
"""

from dataclasses import dataclass

import numpy as np

from .rng import chance


@dataclass
class Disease:
    """
    Infection state owned by a single animal.

    Attributes:
        infected: Currently carrying the disease
        days_infected: Days since infection (always 0 while healthy)
        immune: Recovered with immunity, never re-infected
    """
    infected: bool = False
    days_infected: int = 0
    immune: bool = False

    @property
    def susceptible(self) -> bool:
        return not self.infected and not self.immune

    def infect(self):
        """Start a new infection (no draw)"""
        self.infected = True
        self.days_infected = 0

    def try_infect(self, rng: np.random.Generator, probability: float) -> bool:
        """
        Draw once against the animal's disease probability.

        Returns:
            True if the animal became infected
        """
        if not self.susceptible:
            return False
        if chance(rng, probability):
            self.infect()
            return True
        return False

    def progress(self):
        """Advance an existing infection by one day"""
        if self.infected:
            self.days_infected += 1

    def is_due(self, duration: int) -> bool:
        """Infection has lasted long enough to resolve"""
        return self.infected and self.days_infected >= duration

    def resolve(self, rng: np.random.Generator, mortality_rate: float, grant_immunity: bool) -> bool:
        """
        Resolve a finished infection: death or recovery.

        Args:
            rng: Simulation RNG
            mortality_rate: Probability that the infection is fatal
            grant_immunity: Recovered animals become immune

        Returns:
            True if the infection is fatal (caller kills the animal)
        """
        if chance(rng, mortality_rate):
            return True
        self.clear()
        if grant_immunity:
            self.immune = True
        return False

    def clear(self):
        """Back to healthy (also used on death)"""
        self.infected = False
        self.days_infected = 0

    def to_dict(self) -> dict:
        return {
            'infected': self.infected,
            'days_infected': self.days_infected,
            'immune': self.immune,
        }
