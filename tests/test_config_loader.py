"""
Unit tests for YAML engine configuration.
"""

from pathlib import Path

import pytest

from prompt_parity.analysis_schema import StructuralCategory
from prompt_parity.config_loader import (
    CONFIG_PATH_ENV,
    ConfigLoader,
    build_profiles,
    build_recognizer_rules,
    load_engine_config,
)
from prompt_parity.config_schema import EngineConfig


CONFIG_YAML = """
invoker:
  api_key: "${TEST_ROUTER_KEY}"
  timeout_seconds: 30
  model_aliases:
    gpt-5.2: "openai/gpt-5.2"
benchmark:
  timeout_seconds: 15
rate_limit:
  max_requests: 3
  window_seconds: 10
rewriter:
  model_id: "claude-sonnet-4.5"
  temperatures: [0.4]
profiles:
  - model_id: "local-llm"
    family: "gpt"
    system_instructions: "Answer with headers."
    temperature: 0.3
    nucleus_p: 0.9
    max_output_tokens: 512
    reasoning_bias: 0.9
    features:
      supports_reasoning: true
recognizers:
  - category: "output_format"
    name: "en-in-a-table"
    pattern: "in a table"
"""


@pytest.fixture
def loader():
    return ConfigLoader()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "engine.yaml"
    path.write_text(CONFIG_YAML)
    return path


# ============================================================================
# Config Loader Tests
# ============================================================================

class TestConfigLoader:
    """Tests for ConfigLoader.load_config."""

    def test_loads_sections(self, loader, config_file, monkeypatch):
        monkeypatch.setenv("TEST_ROUTER_KEY", "secret")
        config = loader.load_config(str(config_file))

        assert config.invoker.api_key == "secret"
        assert config.invoker.timeout_seconds == 30
        assert config.invoker.model_aliases == {"gpt-5.2": "openai/gpt-5.2"}
        assert config.benchmark.timeout_seconds == 15
        assert config.rate_limit.max_requests == 3
        assert config.rewriter.model_id == "claude-sonnet-4.5"
        assert config.rewriter.temperatures == [0.4]

    def test_unset_variable_means_no_key(self, loader, config_file, monkeypatch):
        monkeypatch.delenv("TEST_ROUTER_KEY", raising=False)
        config = loader.load_config(str(config_file))
        assert config.invoker.api_key is None

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, loader, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("invoker: [unclosed")
        with pytest.raises(ValueError, match="Invalid YAML"):
            loader.load_config(str(path))

    def test_schema_violation(self, loader, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("rate_limit:\n  max_requests: 0\n")
        with pytest.raises(ValueError, match="validation failed"):
            loader.load_config(str(path))

    def test_empty_file_uses_defaults(self, loader, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = loader.load_config(str(path))
        assert config == EngineConfig()
        assert config.rewriter.temperatures == [0.5, 0.65]
        assert config.rate_limit.max_requests == 5

    def test_environ_mapping_injected(self, config_file, monkeypatch):
        monkeypatch.setenv("TEST_ROUTER_KEY", "from-process")
        config = ConfigLoader(environ={"TEST_ROUTER_KEY": "from-mapping"}).load_config(config_file)
        assert config.invoker.api_key == "from-mapping"

    def test_expand_leaves_unknown_reference(self):
        loader = ConfigLoader(environ={"A": "1"})
        assert loader.expand("${A}-${B}") == "1-${B}"

    def test_non_mapping_document(self, loader, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            loader.load_config(path)


# ============================================================================
# Config Discovery Tests
# ============================================================================

class TestLoadEngineConfig:

    def test_explicit_path(self, config_file):
        config = load_engine_config(config_file, environ={"TEST_ROUTER_KEY": "k"})
        assert config.invoker.api_key == "k"
        assert config.rate_limit.max_requests == 3

    def test_path_from_environment(self, config_file):
        config = load_engine_config(environ={CONFIG_PATH_ENV: str(config_file)})
        assert config.benchmark.timeout_seconds == 15

    def test_bundled_default(self):
        config = load_engine_config(environ={})
        assert config.invoker.api_key is None
        assert config.rewriter.temperatures == [0.5, 0.65]

    def test_missing_override(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_engine_config(environ={CONFIG_PATH_ENV: str(tmp_path / "nope.yaml")})


# ============================================================================
# Builder Tests
# ============================================================================

class TestBuilders:

    def test_build_profiles(self, loader, config_file):
        profiles = build_profiles(loader.load_config(str(config_file)))
        assert len(profiles) == 1
        assert profiles[0].model_id == "local-llm"
        assert profiles[0].max_output_tokens == 512
        assert profiles[0].reasoning_bias == 0.9
        assert profiles[0].features.supports_reasoning is True
        assert profiles[0].features.supports_streaming is True

    def test_build_recognizer_rules(self, loader, config_file):
        rules = build_recognizer_rules(loader.load_config(str(config_file)))
        assert rules[0].category == StructuralCategory.OUTPUT_FORMAT
        assert rules[0].search("Put it IN A TABLE") is not None

    def test_invalid_pattern(self):
        config = EngineConfig(recognizers=[
            {"category": "constraints", "name": "broken", "pattern": "(unclosed"},
        ])
        with pytest.raises(ValueError, match="broken"):
            build_recognizer_rules(config)

    def test_bundled_config_parses(self, loader):
        config = loader.load_config(str(Path(__file__).parent.parent / "config" / "engine.yaml"))
        assert config.rewriter.temperatures == [0.5, 0.65]
        assert build_recognizer_rules(config)[0].name == "en-exclude"
