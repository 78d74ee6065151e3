"""
Tests for the genetics engine.

Covers attribute validation, random generation, mutation bounds,
inheritance (simple and blended) and the gene string codec.
"""

import pytest

from habitat.data_types import SimulationConfig
from habitat.genetics import (
    Attribute,
    AttributeRegistry,
    AttributeValidationError,
    Genetics,
    MalformedGeneError,
    MutationOperator,
    parse_attribute,
)
from habitat.rng import make_rng


def test_random_genes_within_ranges():
    registry = AttributeRegistry()
    rng = make_rng(42)

    for _ in range(200):
        genetics = Genetics.random(registry, rng)
        for attribute in registry.active_attributes():
            definition = registry.definition(attribute)
            value = genetics.get(attribute)
            assert definition.min_value <= value <= definition.max_value
            assert isinstance(value, definition.value_type)

    print("[OK] 200 random genomes within range")


def test_defaults_when_not_carried():
    genetics = Genetics(AttributeRegistry())
    assert genetics.breeding_age == 20
    assert genetics.max_age == 60
    assert genetics.breeding_probability == pytest.approx(0.2)
    assert genetics.max_litter_size == 4
    assert genetics.disease_probability == pytest.approx(0.1)
    assert genetics.metabolism == pytest.approx(0.5)


def test_set_rejects_out_of_range():
    genetics = Genetics(AttributeRegistry())
    genetics.set(Attribute.MAX_AGE, 50)

    with pytest.raises(AttributeValidationError):
        genetics.set(Attribute.MAX_AGE, 121)
    with pytest.raises(AttributeValidationError):
        genetics.set(Attribute.METABOLISM, 0.1)

    # Nothing partially applied
    assert genetics.max_age == 50
    assert not genetics.has(Attribute.METABOLISM)


def test_set_rejects_wrong_type():
    genetics = Genetics(AttributeRegistry())

    with pytest.raises(AttributeValidationError):
        genetics.set(Attribute.MAX_AGE, 50.5)
    with pytest.raises(AttributeValidationError):
        genetics.set(Attribute.MAX_LITTER_SIZE, True)
    with pytest.raises(AttributeValidationError):
        genetics.set(Attribute.BREEDING_PROBABILITY, "0.5")

    # Integers are accepted for real attributes
    genetics.set(Attribute.BREEDING_PROBABILITY, 1)
    assert genetics.breeding_probability == 1.0
    assert isinstance(genetics.breeding_probability, float)


def test_inactive_attribute():
    config = SimulationConfig(active_attributes={'disease_probability': False})
    registry = AttributeRegistry.from_config(config)
    genetics = Genetics.random(registry, make_rng(0))

    assert Attribute.DISEASE_PROBABILITY not in registry.active_attributes()
    assert not genetics.has(Attribute.DISEASE_PROBABILITY)
    assert genetics.disease_probability == pytest.approx(0.1)

    with pytest.raises(AttributeValidationError):
        genetics.set(Attribute.DISEASE_PROBABILITY, 0.5)


def test_parse_attribute():
    assert parse_attribute('max_age') is Attribute.MAX_AGE
    assert parse_attribute(' Metabolism ') is Attribute.METABOLISM
    with pytest.raises(AttributeValidationError):
        parse_attribute('wingspan')


def test_mutation_stays_in_range():
    """Repeated mutation at the bounds never escapes [min, max]"""
    config = SimulationConfig(mutation_probability=1.0)
    registry = AttributeRegistry.from_config(config)
    rng = make_rng(5)

    genetics = Genetics(registry, {
        Attribute.BREEDING_AGE: 12,
        Attribute.MAX_AGE: 120,
        Attribute.BREEDING_PROBABILITY: 0.0,
        Attribute.MAX_LITTER_SIZE: 12,
        Attribute.DISEASE_PROBABILITY: 1.0,
        Attribute.METABOLISM: 0.25,
    })

    for _ in range(500):
        genetics.mutate(rng)
        for attribute in registry.active_attributes():
            definition = registry.definition(attribute)
            assert definition.min_value <= genetics.get(attribute) <= definition.max_value

    print(f"[OK] After 500 mutation rounds: {genetics}")


def test_mutation_probability_zero_is_identity():
    config = SimulationConfig(mutation_probability=0.0)
    registry = AttributeRegistry.from_config(config)
    rng = make_rng(9)
    original = Genetics.random(registry, rng)

    mutated = original.copy()
    for _ in range(50):
        mutated.mutate(rng)

    assert mutated == original


def test_rejected_mutation_leaves_value():
    """A custom operator that always overshoots is never applied"""
    config = SimulationConfig(mutation_probability=1.0)
    registry = AttributeRegistry.from_config(config)
    definition = registry.definition(Attribute.MAX_LITTER_SIZE)
    definition.mutations = [MutationOperator("x100", lambda value, rng: value * 100)]

    genetics = Genetics(registry, {Attribute.MAX_LITTER_SIZE: 3})
    genetics.mutate(make_rng(0))

    assert genetics.max_litter_size == 3


def test_breed_takes_each_value_from_a_parent():
    registry = AttributeRegistry()
    rng = make_rng(11)
    mother = Genetics.random(registry, rng)
    father = Genetics.random(registry, rng)

    for _ in range(50):
        child = Genetics.breed(mother, father, rng)
        for attribute in registry.active_attributes():
            assert child.get(attribute) in (mother.get(attribute), father.get(attribute))


def test_breed_single_parent_attribute_inherited():
    registry = AttributeRegistry()
    mother = Genetics(registry, {Attribute.MAX_AGE: 80})
    father = Genetics(registry)

    child = Genetics.breed(mother, father, make_rng(0))
    assert child.has(Attribute.MAX_AGE)
    assert child.max_age == 80


def test_breed_blended():
    registry = AttributeRegistry()
    mother = Genetics(registry, {Attribute.MAX_AGE: 100, Attribute.METABOLISM: 1.0})
    father = Genetics(registry, {Attribute.MAX_AGE: 51, Attribute.METABOLISM: 0.5})

    child = Genetics.breed_blended(mother, father, make_rng(0), parent_bias=0.5)
    print(f"Blended child: {child}")

    # 75.5 rounds half-up
    assert child.max_age == 76
    assert child.metabolism == pytest.approx(0.75)

    biased = Genetics.breed_blended(mother, father, make_rng(0), parent_bias=1.0)
    assert biased.max_age == 100

    with pytest.raises(AttributeValidationError):
        Genetics.breed_blended(mother, father, make_rng(0), parent_bias=1.5)
    with pytest.raises(AttributeValidationError):
        Genetics.breed(mother, None, make_rng(0))


def test_encode_decode():
    registry = AttributeRegistry()
    genetics = Genetics(registry, {
        Attribute.BREEDING_AGE: 15,
        Attribute.MAX_AGE: 90,
        Attribute.BREEDING_PROBABILITY: 0.25,
        Attribute.MAX_LITTER_SIZE: 7,
        Attribute.DISEASE_PROBABILITY: 0.05,
        Attribute.METABOLISM: 1.0,
    })

    gene = genetics.encode()
    print(f"Gene string: {gene}")
    assert gene == "1509002507005100"
    assert len(gene) == registry.gene_length() == 16

    assert Genetics.decode(registry, gene) == genetics


def test_decode_malformed():
    registry = AttributeRegistry()

    with pytest.raises(MalformedGeneError):
        Genetics.decode(registry, "123")
    with pytest.raises(MalformedGeneError):
        Genetics.decode(registry, "15090025070051x0")
    with pytest.raises(MalformedGeneError):
        Genetics.decode(registry, None)

    # Well formed but out of range (max_age 999)
    with pytest.raises(AttributeValidationError):
        Genetics.decode(registry, "1599902507005100")


def test_gene_length_follows_active_attributes():
    config = SimulationConfig(active_attributes={'breeding_age': False, 'max_litter_size': False})
    registry = AttributeRegistry.from_config(config)
    assert registry.gene_length() == 12
    assert len(Genetics.random(registry, make_rng(1)).encode()) == 12


def test_custom_mutation_operator():
    """Extra operators join the uniform pick"""
    config = SimulationConfig(mutation_probability=1.0)
    registry = AttributeRegistry.from_config(config)
    assert registry.has_definition(Attribute.MAX_AGE)

    definition = registry.definition(Attribute.MAX_AGE)
    definition.mutations = []
    registry.add_mutation(Attribute.MAX_AGE, MutationOperator("+5", lambda value, rng: value + 5))

    genetics = Genetics(registry, {Attribute.MAX_AGE: 50})
    genetics.mutate(make_rng(0))
    assert genetics.max_age == 55
    assert genetics.values() == {Attribute.MAX_AGE: 55}


def test_random_genes_round_trip_through_gene_string():
    """Drawn, mutated and blended genes survive encode/decode unchanged"""
    config = SimulationConfig(mutation_probability=1.0)
    registry = AttributeRegistry.from_config(config)
    rng = make_rng(21)

    for _ in range(20):
        mother = Genetics.random(registry, rng)
        father = Genetics.random(registry, rng)
        child = Genetics.breed_blended(mother, father, rng, parent_bias=0.3).mutate(rng)

        for genetics in (mother, father, child):
            assert Genetics.decode(registry, genetics.encode()) == genetics

    print("[OK] 60 random genomes round-trip exactly")


def test_set_keeps_reals_on_gene_grid():
    genetics = Genetics(AttributeRegistry())
    genetics.set(Attribute.METABOLISM, 0.4875)
    assert genetics.metabolism == 0.49
    assert genetics.encode()[-3:] == "049"
