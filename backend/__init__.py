"""Habitat backend: FastAPI app and configuration."""
