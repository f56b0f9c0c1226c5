import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from . import settings
from .models import FilterConfiguration

log = logging.getLogger("filters.config")


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise RuntimeError(f"Filter configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            cfg = yaml.safe_load(f)
        else:
            cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise RuntimeError(f"Bad filter configuration in {path}: expected a mapping")
    return cfg


def parse_filter_configuration(
    data: Dict[str, Any], *, strict: Optional[bool] = None
) -> FilterConfiguration:
    """
    Build a FilterConfiguration from a plain mapping (camelCase or snake_case keys).
    With `strict`, unknown filter types/operators raise ValueError here instead of
    failing open during evaluation.
    """
    configuration = FilterConfiguration.model_validate(data)
    if settings.FILTER_STRICT_CONFIG if strict is None else strict:
        from ..system import build_filter_system
        from ..validation import _assert_configuration_valid

        _assert_configuration_valid(configuration, build_filter_system(configuration))
    return configuration


def load_filter_configuration(
    path: Optional[Union[str, Path]] = None, *, strict: Optional[bool] = None
) -> FilterConfiguration:
    """
    Read a YAML or JSON configuration file; defaults to FILTER_CONFIG_FILE.
    """
    cfg_path = Path(path) if path is not None else settings.FILTER_CONFIG_FILE
    data = _read_config_file(cfg_path)
    configuration = parse_filter_configuration(data, strict=strict)
    log.info("Loaded %d filter fields from %s", len(configuration.filters), cfg_path)
    return configuration
