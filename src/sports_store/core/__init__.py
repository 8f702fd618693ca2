"""Core enums and error types shared by every layer."""
