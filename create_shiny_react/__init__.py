"""create-shiny-react-app -- scaffold a new shiny-react project from a template.

Quick usage::

    from create_shiny_react import Config, PromptSession, ScaffoldPipeline

    with PromptSession() as session:
        project_path = ScaffoldPipeline(Config(), session).run("my-app")
"""

from create_shiny_react.config import Config
from create_shiny_react.errors import (
    MaterializationError,
    RegistryError,
    ScaffoldError,
    SelectionError,
    TargetExistsError,
)
from create_shiny_react.pipeline import ScaffoldPipeline, main
from create_shiny_react.selector import PromptSession

__version__ = "0.1.0"

__all__ = [
    "Config",
    "MaterializationError",
    "PromptSession",
    "RegistryError",
    "ScaffoldError",
    "ScaffoldPipeline",
    "SelectionError",
    "TargetExistsError",
    "main",
]
