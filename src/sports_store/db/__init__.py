"""SQLAlchemy engine setup and the table backing the document store."""
