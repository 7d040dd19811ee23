"""buildprint schema - validated configuration models."""

from .digest_config import DigestConfig, RemoteTreatment

__all__ = ["DigestConfig", "RemoteTreatment"]
