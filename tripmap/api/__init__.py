"""Core trip map API: models, collaborators and services."""
