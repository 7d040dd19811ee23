"""Loading digest configuration from YAML files."""

from pathlib import Path
from typing import Union

import yaml
from buildprint_common import ValidationError, get_logger
from buildprint_schema import DigestConfig
from pydantic import ValidationError as PydanticValidationError

logger = get_logger("sdk.config")


def load_digest_config(path: Union[str, Path]) -> DigestConfig:
    """
    Load a DigestConfig from a YAML file.

    An empty file yields the default configuration.

    Example file:
        remote_treatment: always_changed

    Raises:
        ValidationError: If the file is missing, not valid YAML, or does
            not describe a valid configuration
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError(f"Cannot read config file {path}: {e.strerror or e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValidationError(f"YAML parsing error in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid config format in {path}: expected a mapping")

    try:
        config = DigestConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid config in {path}: {e}") from e

    logger.debug("Loaded digest config", path=str(path), remote_treatment=config.remote_treatment.value)
    return config
