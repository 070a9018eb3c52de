"""
YAML engine configuration.

${VAR} references are expanded from an environment mapping before parsing;
references to unset variables are left in place for the schema to handle.
"""

import logging
import os
import re
from pathlib import Path
from typing import List, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .config_schema import EngineConfig
from .model_adapters import ExecutionProfile, ModelFeatures
from .recognizers import RecognizerRule

logger = logging.getLogger(__name__)

ENV_REFERENCE = re.compile(r'\$\{(\w+)\}')
CONFIG_PATH_ENV = "PROMPT_PARITY_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "engine.yaml"


class ConfigLoader:
    """Reads an EngineConfig from YAML, expanding variables from `environ`."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def expand(self, text: str) -> str:
        return ENV_REFERENCE.sub(
            lambda m: self.environ.get(m.group(1), m.group(0)), text
        )

    def load_config(self, config_path: Union[str, Path]) -> EngineConfig:
        """
        Load and validate engine configuration.

        Raises:
            FileNotFoundError: no file at config_path
            ValueError: unparsable YAML, a non-mapping document, or schema errors
        """
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            document = yaml.safe_load(self.expand(path.read_text(encoding="utf-8")))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}")

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ValueError(f"{path}: top-level YAML must be a mapping")

        try:
            config = EngineConfig(**document)
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed for {path}: {e}")

        logger.debug(
            "Loaded %s (%d profiles, %d recognizers)",
            path, len(config.profiles), len(config.recognizers),
        )
        return config


def load_engine_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineConfig:
    """Load from `path`, else $PROMPT_PARITY_CONFIG, else the bundled config/engine.yaml."""
    loader = ConfigLoader(environ)
    target = path or loader.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    return loader.load_config(target)


def build_profiles(config: EngineConfig) -> List[ExecutionProfile]:
    return [
        ExecutionProfile(
            model_id=p.model_id,
            family=p.family,
            system_instructions=p.system_instructions,
            temperature=p.temperature,
            nucleus_p=p.nucleus_p,
            max_output_tokens=p.max_output_tokens,
            reasoning_bias=p.reasoning_bias,
            features=ModelFeatures(**p.features.model_dump()),
        )
        for p in config.profiles
    ]


def build_recognizer_rules(config: EngineConfig) -> List[RecognizerRule]:
    rules = []
    for r in config.recognizers:
        try:
            rules.append(RecognizerRule(r.category, r.name, r.pattern))
        except re.error as e:
            raise ValueError(f"Invalid pattern for recognizer {r.name}: {e}")
    return rules
