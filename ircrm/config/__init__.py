"""YAML configuration with JSON schema validation."""
