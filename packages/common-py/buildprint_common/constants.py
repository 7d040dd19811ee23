"""
Shared constants for buildprint packages.
"""

import os


class DigestDefaults:
    """Defaults for a single digest computation."""

    # Resolver pool size
    WORKERS = 4

    # Capacity of the bounded queues between stages
    BUFFER_SIZE = 1024

    # Bytes read per chunk while hashing file content
    CHUNK_SIZE = 64 * 1024

    # Seconds between cancellation checks while blocked on a queue
    QUEUE_POLL_INTERVAL = 0.05

    REMOTE_SCHEMES = ("http://", "https://")


class LogDefaults:
    """Logging defaults."""

    LEVEL = os.getenv("BUILDPRINT_LOG_LEVEL", "INFO").upper()
    SERVICE_NAME = "buildprint"


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Instructions understood by the recipe parser
RECIPE_INSTRUCTIONS = frozenset(
    {
        "ADD",
        "ARG",
        "CMD",
        "COPY",
        "ENTRYPOINT",
        "ENV",
        "EXPOSE",
        "FROM",
        "HEALTHCHECK",
        "LABEL",
        "MAINTAINER",
        "ONBUILD",
        "RUN",
        "SHELL",
        "STOPSIGNAL",
        "USER",
        "VOLUME",
        "WORKDIR",
    }
)

# Instructions whose arguments name build inputs
SOURCE_INSTRUCTIONS = frozenset({"ADD", "COPY"})
