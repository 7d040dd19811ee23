"""buildprint command-line interface."""
