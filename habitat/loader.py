"""
YAML data loader with schema validation.

Loads the habitat configuration and species definitions from YAML files and
validates them against JSON schemas.
"""

import yaml
import json
from pathlib import Path
from typing import Dict, Optional
import jsonschema

from .data_types import FeedingConfig, SpeciesDefinition, SimulationConfig, FEEDING_STRATEGIES


class DataLoadError(Exception):
    """Raised when data loading or validation fails"""
    pass


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DataLoadError(f"YAML parse error in {file_path}: {e}")

    if not isinstance(data, dict):
        raise DataLoadError(f"Expected a mapping at top level of {file_path}")
    return data


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema (skipped if schema file absent)"""
    if not schema_path.exists():
        return

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise DataLoadError(f"Validation error in {data_path}: {e.message}")
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON schema {schema_path}: {e}")


def load_species(file_path: Path, schema_dir: Optional[Path] = None) -> SpeciesDefinition:
    """Load species definition from YAML"""
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "species.schema.json", file_path)

    try:
        feeding = FeedingConfig(**data['feeding'])
        species = SpeciesDefinition(
            species_id=data['species_id'],
            name=data['name'],
            role=data['role'],
            feeding=feeding,
            icon=data.get('icon', ""),
            colour=data.get('colour', "#000000"),
            description=data.get('description')
        )
    except (KeyError, TypeError) as e:
        raise DataLoadError(f"Invalid species definition in {file_path}: {e}")

    if feeding.strategy not in FEEDING_STRATEGIES:
        raise DataLoadError(f"Unknown feeding strategy '{feeding.strategy}' in {file_path}")

    return species


def load_species_registry(species_dir: Path, schema_dir: Optional[Path] = None) -> Dict[str, SpeciesDefinition]:
    """Load all species from directory"""
    species_dir = Path(species_dir)
    if not species_dir.exists():
        raise DataLoadError(f"Species directory not found: {species_dir}")

    registry = {}
    for yaml_file in sorted(species_dir.glob("*.yaml")):
        species = load_species(yaml_file, schema_dir)
        registry[species.species_id] = species

    if not registry:
        raise DataLoadError(f"No species files found in {species_dir}")

    return registry


def load_simulation_config(file_path: Path, schema_dir: Optional[Path] = None) -> SimulationConfig:
    """Load habitat configuration from YAML (missing keys keep code defaults)"""
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "habitat.schema.json", file_path)

    try:
        return SimulationConfig(**data.get('simulation', {}))
    except TypeError as e:
        raise DataLoadError(f"Invalid simulation config in {file_path}: {e}")


def check_references(config: SimulationConfig, species: Dict[str, SpeciesDefinition], source: Path):
    """Every weighted, fallback and prey species must be defined"""
    referenced = set(config.predator_weights) | set(config.prey_weights)
    referenced |= {config.fallback_predator, config.fallback_prey}
    for definition in species.values():
        referenced |= set(definition.feeding.prey_young) | set(definition.feeding.prey_adult)

    missing = sorted(referenced - set(species))
    if missing:
        raise DataLoadError(f"Undefined species referenced in {source}: {', '.join(missing)}")


def load_all_data(data_root: Path, schema_dir: Optional[Path] = None) -> dict:
    """Load all simulation data from data directory

    Returns dict with keys: config, species
    """
    data_root = Path(data_root)

    config_path = data_root / "habitat.yaml"
    config = load_simulation_config(config_path, schema_dir)
    species = load_species_registry(data_root / "species", schema_dir)
    check_references(config, species, data_root)

    return {
        'config': config,
        'species': species
    }
