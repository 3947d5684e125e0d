"""Content generation pipeline."""
