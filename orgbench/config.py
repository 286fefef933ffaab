"""Engine configuration and environment presets."""

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from orgbench.errors import InvalidInputError

type ConfigDict = dict[str, str | int | float | bool]

PROJECT_ROOT = Path(__file__).parent.parent


@dataclass(frozen=True)
class EngineConfig:
    fuzzy_threshold: float = 0.8
    fuzzy_confidence_cap: float = 0.95
    taxonomy_confidence: float = 0.8
    exact_min_confidence: float = 0.85
    report_penalty: float = 0.05
    report_margin: int = 2
    batch_workers: int = 8
    default_target_percentile: int = 50
    outlier_threshold: float = 2.5
    min_span_of_control: int = 3


def load_engine_config(env: str = "production", overrides: ConfigDict | None = None) -> EngineConfig:
    match env:
        case "production":
            config = EngineConfig()
        case "staging":
            config = EngineConfig(batch_workers=4)
        case "development":
            config = EngineConfig(batch_workers=2, fuzzy_threshold=0.75)
        case "test":
            config = EngineConfig(batch_workers=1)
        case other:
            raise InvalidInputError(f"Unknown environment: {other}")

    if overrides is None:
        overrides = get_env_config()
    config = apply_overrides(config, overrides)
    validate_engine_config(config)
    return config


def apply_overrides(config: EngineConfig, overrides: ConfigDict) -> EngineConfig:
    known = {f.name for f in fields(EngineConfig)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            raise InvalidInputError(f"Unknown engine setting: {key}")
        changes[key] = value
    return replace(config, **changes)


def validate_engine_config(config: EngineConfig) -> None:
    for name in ("fuzzy_threshold", "fuzzy_confidence_cap", "taxonomy_confidence", "exact_min_confidence"):
        value = getattr(config, name)
        if not 0 <= value <= 1:
            raise InvalidInputError(f"{name} must be within [0, 1], got {value}")
    if config.batch_workers < 1:
        raise InvalidInputError(f"batch_workers must be >= 1, got {config.batch_workers}")
    if config.report_margin < 0:
        raise InvalidInputError(f"report_margin must be >= 0, got {config.report_margin}")
    if not 0 < config.default_target_percentile < 100:
        raise InvalidInputError(
            f"default_target_percentile must be within (0, 100), got {config.default_target_percentile}"
        )


def get_env_config(root: Path = PROJECT_ROOT) -> ConfigDict:
    """Read engine overrides from orgbench.yaml, falling back to pyproject.toml."""
    config_path = root / "orgbench.yaml"
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        return data.get("engine", {})

    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return {}
    with open(pyproject, "rb") as f:
        data = tomllib.load(f)
    return data.get("tool", {}).get("orgbench", {})
