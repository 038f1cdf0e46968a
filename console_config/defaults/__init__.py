"""Built-in project templates."""

from functools import lru_cache
from importlib import resources

import yaml

from console_config.models.project import ProjectConfiguration

DEFAULT_PROJECTS_FILE = "default_projects.yaml"


@lru_cache
def _load_raw_templates() -> tuple[dict, ...]:
    text = resources.files(__package__).joinpath(DEFAULT_PROJECTS_FILE).read_text("utf-8")
    data = yaml.safe_load(text) or {}
    return tuple(data.get("projects", []))


def load_default_projects() -> list[ProjectConfiguration]:
    """Parse the bundled templates; each call returns fresh copies."""
    return [ProjectConfiguration.model_validate(raw) for raw in _load_raw_templates()]

