"""Identifier generation for persistent records."""

import uuid


UUID_LENGTH = 15


def generate_uuid() -> str:
    """Return a 15 character uppercase identifier derived from a random UUID."""
    return uuid.uuid4().hex.upper()[:UUID_LENGTH]


def generate_email_address() -> str:
    """Return a unique placeholder email address for a fresh user."""
    return f"{generate_uuid().lower()}@sports-store.local"


def generate_training_type_name() -> str:
    """Return a unique placeholder name for a fresh training type."""
    return f"training-type-{generate_uuid().lower()}"
