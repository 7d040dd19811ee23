"""
buildprint Digest Configuration Schema

Pydantic models describing how a single digest computation treats its inputs.

Design Principles:
- Pure validation: receives dicts or keyword arguments, returns typed objects
- Immutable: a config is fixed for the duration of one invocation
- No file I/O: reading YAML files is the SDK's responsibility

Usage:
    from buildprint_schema import DigestConfig, RemoteTreatment

    config = DigestConfig(remote_treatment=RemoteTreatment.ALWAYS_CHANGED)
    config = DigestConfig.model_validate({"remote_treatment": "always-changed"})
"""

from enum import Enum
from typing import Any

from buildprint_common import ValidationError
from pydantic import BaseModel, ConfigDict, field_validator


class RemoteTreatment(str, Enum):
    """How remote (URL) sources contribute to a digest."""

    UNCHANGED = "unchanged"
    """The URL string itself is hashed, so the digest is stable across runs."""

    ALWAYS_CHANGED = "always_changed"
    """The current time is hashed, so every run yields a different digest."""


class DigestConfig(BaseModel):
    """
    Options for one digest computation.

    Attributes:
        download_remote: Fetch remote sources instead of fingerprinting them
            symbolically. Not supported; must stay False.
        remote_treatment: Policy for remote sources.
    """

    download_remote: bool = False
    remote_treatment: RemoteTreatment = RemoteTreatment.UNCHANGED

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("download_remote")
    @classmethod
    def validate_download_remote(cls, v: bool) -> bool:
        """Downloading remote sources is not implemented"""
        if v:
            raise ValidationError(
                "download_remote is not supported: remote sources are fingerprinted, never fetched"
            )
        return v

    @field_validator("remote_treatment", mode="before")
    @classmethod
    def normalize_remote_treatment(cls, v: Any) -> Any:
        """Accept 'Always-Changed', 'ALWAYS_CHANGED' and similar spellings"""
        if isinstance(v, RemoteTreatment):
            return v
        if isinstance(v, str):
            normalized = v.strip().lower().replace("-", "_")
            valid = [t.value for t in RemoteTreatment]
            if normalized not in valid:
                raise ValidationError(
                    f"Unsupported remote treatment: '{v}'. Supported values: {', '.join(valid)}"
                )
            return normalized
        return v
