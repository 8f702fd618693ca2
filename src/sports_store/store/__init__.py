"""Document store collaborators (in-memory and SQLAlchemy backed)."""
