import pytest

from orgbench.config import EngineConfig, apply_overrides, get_env_config, load_engine_config, validate_engine_config
from orgbench.errors import InvalidInputError


class TestLoadEngineConfig:
    def test_presets(self):
        assert load_engine_config("production", overrides={}) == EngineConfig()
        assert load_engine_config("test", overrides={}).batch_workers == 1
        assert load_engine_config("development", overrides={}).fuzzy_threshold == 0.75

    def test_unknown_environment(self):
        with pytest.raises(InvalidInputError, match="Unknown environment"):
            load_engine_config("moon", overrides={})

    def test_overrides_applied(self):
        config = load_engine_config("staging", overrides={"fuzzy_threshold": 0.9})
        assert config.fuzzy_threshold == 0.9
        assert config.batch_workers == 4

    def test_invalid_override_value(self):
        with pytest.raises(InvalidInputError):
            load_engine_config("production", overrides={"fuzzy_threshold": 1.5})


def test_unknown_setting():
    with pytest.raises(InvalidInputError, match="Unknown engine setting"):
        apply_overrides(EngineConfig(), {"colour": "blue"})


@pytest.mark.parametrize("changes", [
    {"batch_workers": 0},
    {"report_margin": -1},
    {"default_target_percentile": 100},
    {"exact_min_confidence": -0.1},
])
def test_validate_engine_config(changes):
    with pytest.raises(InvalidInputError):
        validate_engine_config(EngineConfig(**changes))


class TestGetEnvConfig:
    def test_yaml_file(self, tmp_path):
        (tmp_path / "orgbench.yaml").write_text("engine:\n  batch_workers: 3\n")
        assert get_env_config(tmp_path) == {"batch_workers": 3}

    def test_pyproject_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[tool.orgbench]\nreport_margin = 1\n')
        assert get_env_config(tmp_path) == {"report_margin": 1}

    def test_yaml_takes_precedence(self, tmp_path):
        (tmp_path / "orgbench.yaml").write_text("engine:\n  batch_workers: 3\n")
        (tmp_path / "pyproject.toml").write_text('[tool.orgbench]\nreport_margin = 1\n')
        assert get_env_config(tmp_path) == {"batch_workers": 3}

    def test_nothing_configured(self, tmp_path):
        assert get_env_config(tmp_path) == {}
