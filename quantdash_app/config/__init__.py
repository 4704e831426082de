"""
Configuration module.

Frozen dataclass defaults, YAML per-asset overrides and validation.
"""
