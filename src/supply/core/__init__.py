"""Core types shared across the pipeline: enums, errors, protocols, config."""
