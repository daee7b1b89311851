"""SQLAlchemy-backed user directory."""
