"""Configuration: constants, preference models and the JSON config store."""
