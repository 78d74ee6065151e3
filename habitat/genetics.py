"""
Genetics engine for habitat animals.

Defines the attribute catalogue (ranges, defaults, mutation operators,
validators), random gene generation, validated mutation, inheritance
(simple and blended) and the fixed-width gene string codec.

Mutation policy: once per attribute per breeding event, with the attribute's
mutation probability, one operator is picked uniformly and applied. The
candidate is kept only if the validator accepts it; a rejected mutation is
discarded for that event (no retry).

Gene string layout (active attributes, catalogue order, zero-padded digits):
    breeding_age(2) max_age(3) breeding_probability(3) max_litter_size(2)
    disease_probability(3) metabolism(3)
Real attributes are stored in hundredths (0.25 -> "025") and real values are
kept on that grid (random draws, set, mutation, blending), so encode() and
decode() round-trip exactly.
"""

import math
import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .constants import (
    MUTATION_PROBABILITY,
    INT_MUTATION_STEP,
    REAL_MUTATION_STEP,
    REAL_GENE_SCALE,
    PARENT_BIAS_DEFAULT,
)
from .rng import chance, random_int


class MalformedGeneError(Exception):
    """Raised when a gene string has an unexpected length or content"""
    pass


class AttributeValidationError(Exception):
    """Raised when an attribute or attribute value is rejected"""
    pass


class Attribute(Enum):
    """Heritable life parameters"""
    BREEDING_AGE = 'breeding_age'
    MAX_AGE = 'max_age'
    BREEDING_PROBABILITY = 'breeding_probability'
    MAX_LITTER_SIZE = 'max_litter_size'
    DISEASE_PROBABILITY = 'disease_probability'
    METABOLISM = 'metabolism'


def parse_attribute(key: Union[Attribute, str]) -> Attribute:
    """
    Resolve an Attribute from an enum member, its value or its name.

    Raises:
        AttributeValidationError: Unknown attribute key
    """
    if isinstance(key, Attribute):
        return key
    if isinstance(key, str):
        normalized = key.strip().lower()
        for attribute in Attribute:
            if attribute.value == normalized:
                return attribute
    raise AttributeValidationError(f"Unknown attribute: {key!r}")


# ============================================================================
# Mutation Operators
# ============================================================================

@dataclass(frozen=True)
class MutationOperator:
    """Named, pluggable transformation of one attribute value"""
    name: str
    fn: Callable[[Any, np.random.Generator], Any]

    def apply(self, value: Any, rng: np.random.Generator) -> Any:
        return self.fn(value, rng)


def int_increment(step: int) -> MutationOperator:
    """Add a fixed integer step"""
    return MutationOperator(f"{step:+d}", lambda value, rng: value + step)


def real_increment(step: float) -> MutationOperator:
    """Add a fixed real step"""
    # Rounded so that repeated steps land exactly on range bounds
    return MutationOperator(f"{step:+g}", lambda value, rng: round(value + step, 10))


# ============================================================================
# Attribute Definitions
# ============================================================================

@dataclass
class AttributeDefinition:
    """
    Static metadata for one heritable attribute.

    Attributes:
        attribute: Attribute this definition describes
        value_type: int or float
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound
        default_value: Value reported when an animal does not carry the attribute
        mutations: Candidate mutation operators
        mutation_probability: Chance per breeding event that a mutation is attempted
        encoding_width: Digits used in gene strings
        encoding_scale: Multiplier applied to reals before encoding
        validator: Optional extra acceptance check for mutated values
    """
    attribute: Attribute
    value_type: type
    min_value: Union[int, float]
    max_value: Union[int, float]
    default_value: Union[int, float]
    mutations: List[MutationOperator] = field(default_factory=list)
    mutation_probability: float = MUTATION_PROBABILITY
    encoding_width: int = 3
    encoding_scale: int = 1
    validator: Optional[Callable[[Any], bool]] = None

    def in_range(self, value: Any) -> bool:
        return self.min_value <= value <= self.max_value

    def accepts(self, candidate: Any) -> bool:
        """Validator for mutated values: always range-checked"""
        if not self.in_range(candidate):
            return False
        return self.validator is None or bool(self.validator(candidate))

    def check(self, value: Any) -> Union[int, float]:
        """
        Type- and range-check a value, returning it as the builtin type.

        Raises:
            AttributeValidationError: Wrong type or out of range
        """
        name = self.attribute.value
        if isinstance(value, (bool, np.bool_)):
            raise AttributeValidationError(
                f"Invalid type for attribute {name}. Expected: {self.value_type.__name__}, Got: bool"
            )

        if self.value_type is int:
            if not isinstance(value, (int, np.integer)):
                raise AttributeValidationError(
                    f"Invalid type for attribute {name}. Expected: int, Got: {type(value).__name__}"
                )
            value = int(value)
        else:
            if not isinstance(value, (int, float, np.integer, np.floating)):
                raise AttributeValidationError(
                    f"Invalid type for attribute {name}. Expected: float, Got: {type(value).__name__}"
                )
            value = float(value)

        if not self.in_range(value):
            raise AttributeValidationError(
                f"Value {value} for attribute {name} is outside allowed range "
                f"[{self.min_value}, {self.max_value}]"
            )
        return self.snap(value)

    def snap(self, value: Union[int, float]) -> Union[int, float]:
        """Round a value onto the gene-string grid (hundredths for reals)"""
        if self.value_type is int:
            return int(value)
        return int(round(value * self.encoding_scale)) / self.encoding_scale

    def random_value(self, rng: np.random.Generator) -> Union[int, float]:
        """Uniform draw within [min, max], on the gene-string grid"""
        if self.value_type is int:
            return random_int(rng, self.min_value, self.max_value)
        low = int(round(self.min_value * self.encoding_scale))
        high = int(round(self.max_value * self.encoding_scale))
        return random_int(rng, low, high) / self.encoding_scale

    def encode_value(self, value: Union[int, float]) -> str:
        digits = int(round(value * self.encoding_scale))
        return str(digits).zfill(self.encoding_width)

    def decode_value(self, segment: str) -> Union[int, float]:
        digits = int(segment)
        if self.value_type is int:
            return digits
        return digits / self.encoding_scale


def default_definitions(mutation_probability: float = MUTATION_PROBABILITY) -> List[AttributeDefinition]:
    """Built-in attribute catalogue"""
    int_steps = [int_increment(INT_MUTATION_STEP), int_increment(-INT_MUTATION_STEP)]
    real_steps = [real_increment(REAL_MUTATION_STEP), real_increment(-REAL_MUTATION_STEP)]

    return [
        AttributeDefinition(
            attribute=Attribute.BREEDING_AGE, value_type=int,
            min_value=12, max_value=90, default_value=20,
            mutations=list(int_steps), mutation_probability=mutation_probability,
            encoding_width=2,
        ),
        AttributeDefinition(
            attribute=Attribute.MAX_AGE, value_type=int,
            min_value=10, max_value=120, default_value=60,
            mutations=list(int_steps), mutation_probability=mutation_probability,
            encoding_width=3,
        ),
        AttributeDefinition(
            attribute=Attribute.BREEDING_PROBABILITY, value_type=float,
            min_value=0.0, max_value=1.0, default_value=0.2,
            mutations=list(real_steps), mutation_probability=mutation_probability,
            encoding_width=3, encoding_scale=REAL_GENE_SCALE,
        ),
        AttributeDefinition(
            attribute=Attribute.MAX_LITTER_SIZE, value_type=int,
            min_value=1, max_value=12, default_value=4,
            mutations=list(int_steps), mutation_probability=mutation_probability,
            encoding_width=2,
        ),
        AttributeDefinition(
            attribute=Attribute.DISEASE_PROBABILITY, value_type=float,
            min_value=0.0, max_value=1.0, default_value=0.1,
            mutations=list(real_steps), mutation_probability=mutation_probability,
            encoding_width=3, encoding_scale=REAL_GENE_SCALE,
        ),
        AttributeDefinition(
            attribute=Attribute.METABOLISM, value_type=float,
            min_value=0.25, max_value=1.0, default_value=0.5,
            mutations=list(real_steps), mutation_probability=mutation_probability,
            encoding_width=3, encoding_scale=REAL_GENE_SCALE,
        ),
    ]


class AttributeRegistry:
    """
    Attribute definitions and activation flags for one simulation run.

    Inactive attributes are not generated, inherited, mutated or encoded;
    readers fall back to the definition default.
    """

    def __init__(self, mutation_probability: float = MUTATION_PROBABILITY, register_defaults: bool = True):
        self._definitions: Dict[Attribute, AttributeDefinition] = {}
        self._active: Dict[Attribute, bool] = {}

        if register_defaults:
            for definition in default_definitions(mutation_probability):
                self.register(definition, active=True)

    @classmethod
    def from_config(cls, config) -> 'AttributeRegistry':
        """
        Build registry from a SimulationConfig.

        Args:
            config: SimulationConfig (mutation_probability, active_attributes)
        """
        registry = cls(mutation_probability=config.mutation_probability)
        for key, enabled in config.active_attributes.items():
            registry.set_active(parse_attribute(key), bool(enabled))
        return registry

    def register(self, definition: AttributeDefinition, active: bool = False):
        """Add or replace a definition; an existing activation flag is kept"""
        self._definitions[definition.attribute] = definition
        self._active.setdefault(definition.attribute, active)

    def has_definition(self, attribute: Attribute) -> bool:
        return attribute in self._definitions

    def definition(self, attribute: Attribute) -> AttributeDefinition:
        if attribute not in self._definitions:
            raise AttributeValidationError(f"No definition found for attribute: {attribute}")
        return self._definitions[attribute]

    def set_active(self, attribute: Attribute, active: bool):
        if attribute not in self._definitions:
            raise AttributeValidationError(f"Unknown attribute: {attribute}")
        self._active[attribute] = active

    def is_active(self, attribute: Attribute) -> bool:
        return self._active.get(attribute, False)

    def active_attributes(self) -> List[Attribute]:
        """Active attributes in catalogue order"""
        return [a for a in Attribute if self._definitions.get(a) is not None and self.is_active(a)]

    def add_mutation(self, attribute: Attribute, operator: MutationOperator):
        self.definition(attribute).mutations.append(operator)

    def gene_length(self) -> int:
        return sum(self._definitions[a].encoding_width for a in self.active_attributes())


# ============================================================================
# Genetics
# ============================================================================

class Genetics:
    """
    Heritable attribute values of one animal.

    Every stored value lies within its attribute's [min, max]. Values are set
    at creation (random or bred) and only change through mutate() during
    breeding.
    """

    def __init__(self, registry: AttributeRegistry, values: Optional[Dict[Attribute, Any]] = None):
        self.registry = registry
        self._values: Dict[Attribute, Union[int, float]] = {}

        if values:
            for attribute, value in values.items():
                self.set(attribute, value)

    @classmethod
    def random(cls, registry: AttributeRegistry, rng: np.random.Generator) -> 'Genetics':
        """First-generation genes: uniform draw per active attribute"""
        genetics = cls(registry)
        for attribute in registry.active_attributes():
            genetics._values[attribute] = registry.definition(attribute).random_value(rng)
        return genetics

    def has(self, attribute: Attribute) -> bool:
        return attribute in self._values

    def get(self, attribute: Attribute) -> Union[int, float]:
        """Stored value, or the definition default if not carried"""
        attribute = parse_attribute(attribute)
        if attribute in self._values:
            return self._values[attribute]
        return self.registry.definition(attribute).default_value

    def set(self, attribute: Attribute, value: Any):
        """
        Validate and store an attribute value.

        Raises:
            AttributeValidationError: Unknown or inactive attribute, wrong type,
                or value outside [min, max]. Nothing is stored on failure.
        """
        attribute = parse_attribute(attribute)
        definition = self.registry.definition(attribute)
        if not self.registry.is_active(attribute):
            raise AttributeValidationError(f"Cannot set inactive attribute: {attribute.value}")
        self._values[attribute] = definition.check(value)

    def values(self) -> Dict[Attribute, Union[int, float]]:
        return dict(self._values)

    def copy(self) -> 'Genetics':
        """Copy of the active attributes"""
        genetics = Genetics(self.registry)
        for attribute in self.registry.active_attributes():
            if attribute in self._values:
                genetics._values[attribute] = self._values[attribute]
        return genetics

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def mutate(self, rng: np.random.Generator) -> 'Genetics':
        """
        Apply one mutation round in place.

        Returns:
            self (for chaining)
        """
        for attribute in self.registry.active_attributes():
            if attribute not in self._values:
                continue
            definition = self.registry.definition(attribute)
            if chance(rng, definition.mutation_probability):
                self._apply_mutation(definition, rng)
        return self

    def _apply_mutation(self, definition: AttributeDefinition, rng: np.random.Generator):
        if not definition.mutations:
            return

        operator = definition.mutations[int(rng.integers(len(definition.mutations)))]
        current = self._values[definition.attribute]
        candidate = definition.snap(operator.apply(current, rng))

        # Rejected candidates leave the value unchanged
        if definition.accepts(candidate):
            self._values[definition.attribute] = definition.value_type(candidate)

    # ------------------------------------------------------------------
    # Inheritance
    # ------------------------------------------------------------------

    @staticmethod
    def breed(parent_a: 'Genetics', parent_b: 'Genetics', rng: np.random.Generator) -> 'Genetics':
        """
        Simple inheritance: each attribute comes from one parent at random.

        Attributes carried by only one parent are inherited unmodified.
        """
        if parent_a is None or parent_b is None:
            raise AttributeValidationError("Both parents must be non-null")

        registry = parent_a.registry
        offspring = Genetics(registry)

        for attribute in registry.active_attributes():
            in_a = parent_a.has(attribute)
            in_b = parent_b.has(attribute)
            if in_a and in_b:
                selected = parent_a if rng.random() < 0.5 else parent_b
                offspring._values[attribute] = selected._values[attribute]
            elif in_a:
                offspring._values[attribute] = parent_a._values[attribute]
            elif in_b:
                offspring._values[attribute] = parent_b._values[attribute]

        return offspring

    @staticmethod
    def breed_blended(
        parent_a: 'Genetics',
        parent_b: 'Genetics',
        rng: np.random.Generator,
        parent_bias: float = PARENT_BIAS_DEFAULT,
        blend_numerics: bool = True
    ) -> 'Genetics':
        """
        Advanced inheritance with a parent bias.

        Numeric attributes become the weighted average
        parent_a * bias + parent_b * (1 - bias) (integers rounded half-up).
        With blend_numerics=False each attribute is taken from parent_a with
        probability bias, otherwise from parent_b.

        Args:
            parent_a: First parent
            parent_b: Second parent
            rng: Simulation RNG
            parent_bias: Weight of parent_a in [0, 1]
            blend_numerics: Average numeric attributes instead of picking

        Raises:
            AttributeValidationError: Missing parent or bias outside [0, 1]
        """
        if parent_a is None or parent_b is None:
            raise AttributeValidationError("Both parents must be non-null")
        if not 0.0 <= parent_bias <= 1.0:
            raise AttributeValidationError("Parent bias must be between 0.0 and 1.0")

        registry = parent_a.registry
        offspring = Genetics(registry)

        for attribute in registry.active_attributes():
            in_a = parent_a.has(attribute)
            in_b = parent_b.has(attribute)
            if not in_a and not in_b:
                continue
            if not in_a:
                offspring._values[attribute] = parent_b._values[attribute]
                continue
            if not in_b:
                offspring._values[attribute] = parent_a._values[attribute]
                continue

            definition = registry.definition(attribute)
            value_a = parent_a._values[attribute]
            value_b = parent_b._values[attribute]

            if blend_numerics and definition.value_type in (int, float):
                blended = value_a * parent_bias + value_b * (1.0 - parent_bias)
                if definition.value_type is int:
                    blended = int(math.floor(blended + 0.5))
                blended = min(max(blended, definition.min_value), definition.max_value)
                offspring._values[attribute] = definition.snap(definition.value_type(blended))
            else:
                selected = value_a if rng.random() < parent_bias else value_b
                offspring._values[attribute] = selected

        return offspring

    # ------------------------------------------------------------------
    # Gene strings
    # ------------------------------------------------------------------

    def encode(self) -> str:
        """Fixed-width digit string of the active attributes"""
        parts = []
        for attribute in self.registry.active_attributes():
            definition = self.registry.definition(attribute)
            parts.append(definition.encode_value(self.get(attribute)))
        return "".join(parts)

    @classmethod
    def decode(cls, registry: AttributeRegistry, gene: str) -> 'Genetics':
        """
        Parse a gene string produced by encode().

        Raises:
            MalformedGeneError: Unexpected length or non-digit content
            AttributeValidationError: A decoded value is out of range
        """
        expected = registry.gene_length()
        if not isinstance(gene, str) or len(gene) != expected:
            length = len(gene) if isinstance(gene, str) else None
            raise MalformedGeneError(f"Unexpected gene length: expected {expected}, got {length}")
        if any(c not in "0123456789" for c in gene):
            raise MalformedGeneError(f"Gene contains non-digit characters: {gene!r}")

        genetics = cls(registry)
        offset = 0
        for attribute in registry.active_attributes():
            definition = registry.definition(attribute)
            segment = gene[offset:offset + definition.encoding_width]
            offset += definition.encoding_width
            genetics.set(attribute, definition.decode_value(segment))

        return genetics

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def breeding_age(self) -> int:
        return self.get(Attribute.BREEDING_AGE)

    @property
    def max_age(self) -> int:
        return self.get(Attribute.MAX_AGE)

    @property
    def breeding_probability(self) -> float:
        return self.get(Attribute.BREEDING_PROBABILITY)

    @property
    def max_litter_size(self) -> int:
        return self.get(Attribute.MAX_LITTER_SIZE)

    @property
    def disease_probability(self) -> float:
        return self.get(Attribute.DISEASE_PROBABILITY)

    @property
    def metabolism(self) -> float:
        return self.get(Attribute.METABOLISM)

    def to_dict(self) -> dict:
        return {attribute.value: value for attribute, value in self._values.items()}

    def __eq__(self, other) -> bool:
        if not isinstance(other, Genetics):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Genetics({self.to_dict()})"
