"""
Central configuration constants for habitat simulation.

Defines default values, thresholds, and configuration parameters
used across multiple modules.
"""

# ============================================================================
# Field Configuration
# ============================================================================

DEFAULT_FIELD_HEIGHT = 80
DEFAULT_FIELD_WIDTH = 120


# ============================================================================
# Population Seeding
# ============================================================================

# Per-cell probabilities used when populating an empty field
PREDATOR_CREATION_PROBABILITY = 0.03
PREY_CREATION_PROBABILITY = 0.09

# Chance that a first-generation animal starts infected
INITIAL_INFECTION_PROBABILITY = 0.5

# Spawn weights (predators and prey are drawn from independent pools)
DEFAULT_PREDATOR_WEIGHTS = {
    'tiger': 50.0,
    'leopard': 50.0,
}
DEFAULT_PREY_WEIGHTS = {
    'deer': 34.0,
    'hare': 33.0,
    'wild_boar': 33.0,
}

# Used when a weight table sums to zero
FALLBACK_PREDATOR = 'tiger'
FALLBACK_PREY = 'hare'


# ============================================================================
# Feeding
# ============================================================================

PLANT_FOOD_VALUE = 9.0   # Food level after grazing a plant
PREY_FOOD_VALUE = 9.0    # Food level after eating an animal


# ============================================================================
# Disease
# ============================================================================

DISEASE_DURATION_DAYS = 5
DISEASE_MORTALITY_RATE = 0.3
RECOVERED_IMMUNE = False  # Recovered animals may be re-infected


# ============================================================================
# Genetics
# ============================================================================

MUTATION_PROBABILITY = 0.2   # Per attribute, per breeding event
PARENT_BIAS_DEFAULT = 0.5    # Weight of the first parent in blended inheritance

INT_MUTATION_STEP = 1
REAL_MUTATION_STEP = 0.01
REAL_GENE_SCALE = 100        # Reals are stored as hundredths in gene strings


# ============================================================================
# Telemetry
# ============================================================================

STEP_TIME_WINDOW = 100        # Number of steps to average
STEP_SUMMARY_INTERVAL = 50    # Print summary every N steps (driver script)

DEATH_CAUSES = ('old_age', 'starvation', 'disease', 'overcrowding', 'eaten')
