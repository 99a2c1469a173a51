"""Configuration section models."""
