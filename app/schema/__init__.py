"""SQLAlchemy table models for generated content."""
