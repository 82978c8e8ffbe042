"""Primary key helpers shared by the ORM models."""

import uuid


def new_id() -> str:
    """Return a fresh string UUID for use as a primary key."""
    return str(uuid.uuid4())
