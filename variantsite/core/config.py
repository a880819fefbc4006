"""
Configuration management for VariantSite
"""

import os
import yaml
from pathlib import Path
from typing import Optional, List
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Sanity content backend
    SANITY_PROJECT_ID: str = os.getenv('SANITY_PROJECT_ID', '')
    SANITY_DATASET: str = os.getenv('SANITY_DATASET', 'production')
    SANITY_API_VERSION: str = os.getenv('SANITY_API_VERSION', '2024-03-19')
    SANITY_TOKEN: str = os.getenv('SANITY_TOKEN', '')
    SANITY_USE_CDN: bool = os.getenv('SANITY_USE_CDN', 'false').lower() == 'true'
    SANITY_TIMEOUT_SECONDS: float = float(os.getenv('SANITY_TIMEOUT_SECONDS', '10'))

    # Query cache (0 disables caching)
    CONTENT_CACHE_TTL_SECONDS: float = float(os.getenv('CONTENT_CACHE_TTL_SECONDS', '60'))

    # Experiment catalog shown to editors and API clients
    EXPERIMENTS_CONFIG_PATH: str = os.getenv('EXPERIMENTS_CONFIG_PATH', 'config/experiments.yml')

    # API
    CORS_ORIGINS: str = os.getenv('CORS_ORIGINS', '*')
    VARIANTSITE_API_KEY: str = os.getenv('VARIANTSITE_API_KEY', '')
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv('RATE_LIMIT_PER_MINUTE', '60'))

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'SANITY_PROJECT_ID': cls.SANITY_PROJECT_ID,
            'SANITY_DATASET': cls.SANITY_DATASET,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)


# Experiment catalog


@dataclass
class ExperimentVariantOption:
    """One selectable variant of an experiment"""
    id: str
    label: str


@dataclass
class ExperimentDefinition:
    """Field-level experiment declared for editors (e.g. customer variants)"""
    id: str
    label: str
    variants: List[ExperimentVariantOption] = field(default_factory=list)

    def variant_ids(self) -> List[str]:
        return [v.id for v in self.variants]


def load_experiment_config(path: Optional[str] = None) -> List[ExperimentDefinition]:
    """
    Load the experiment catalog.

    Loads from: config/experiments.yml (or EXPERIMENTS_CONFIG_PATH)

    Args:
        path: Optional override for the YAML file location

    Returns:
        List of ExperimentDefinition instances, in file order

    Raises:
        FileNotFoundError: If the YAML file doesn't exist
        ValueError: If an experiment or variant is missing its id
    """
    config_path = Path(path or Config.EXPERIMENTS_CONFIG_PATH)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Experiment configuration not found at {config_path}\n"
            f"Create an experiments.yml file or set EXPERIMENTS_CONFIG_PATH."
        )

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    experiments = []
    for exp_data in raw_config.get('experiments', []):
        exp_id = exp_data.get('id')
        if not exp_id:
            raise ValueError(f"Experiment without id in {config_path}")

        options = []
        for variant_data in exp_data.get('variants', []):
            if not variant_data.get('id'):
                raise ValueError(f"Variant without id in experiment '{exp_id}'")
            options.append(ExperimentVariantOption(
                id=variant_data['id'],
                label=variant_data.get('label', variant_data['id'])
            ))

        experiments.append(ExperimentDefinition(
            id=exp_id,
            label=exp_data.get('label', exp_id),
            variants=options
        ))

    return experiments
