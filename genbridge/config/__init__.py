"""Configuration resolution: environment settings and YAML profiles."""
