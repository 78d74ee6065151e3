"""
Population statistics over a field.

Counts are taken from the grid itself, so they always reflect what is
actually placed (dead animals already vacated their cells).
"""

from collections import Counter
from typing import Dict

from .field import Field


PLANT_KEY = 'plant'


def count_population(field: Field) -> Dict[str, int]:
    """
    Live organisms per species.

    Returns:
        {species_id: count} plus 'plant' for plants
    """
    counts = Counter()
    for organism in field.organisms():
        if not organism.alive:
            continue
        if organism.is_animal:
            counts[organism.species_id] += 1
        else:
            counts[PLANT_KEY] += 1
    return dict(counts)


def count_infected(field: Field) -> Dict[str, int]:
    """Currently infected live animals per species"""
    counts = Counter()
    for animal in field.animals():
        if animal.alive and animal.disease.infected:
            counts[animal.species_id] += 1
    return dict(counts)


def is_viable(field: Field) -> bool:
    """True while at least one animal species has a live member"""
    counts = count_population(field)
    return any(count > 0 for key, count in counts.items() if key != PLANT_KEY)


def summarize(field: Field) -> str:
    """One-line population summary, species sorted by name"""
    counts = count_population(field)
    infected = count_infected(field)
    parts = []
    for species_id in sorted(counts):
        if species_id == PLANT_KEY:
            continue
        part = f"{species_id}={counts[species_id]}"
        if infected.get(species_id):
            part += f" ({infected[species_id]} sick)"
        parts.append(part)
    parts.append(f"{PLANT_KEY}={counts.get(PLANT_KEY, 0)}")
    return ", ".join(parts)
