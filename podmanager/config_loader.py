import yaml
from typing import Optional

from podmanager.models.config import Settings


def load_config(path: Optional[str] = None) -> Settings:
    """Build settings from the environment, overlaid with a YAML file when given."""
    if not path:
        return Settings()
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return Settings(**raw)
