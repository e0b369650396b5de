"""Configuration: models, discovery, unified settings, and logging."""
