"""Opaque identifier generation for blueprints, fields and contracts."""

from typing import Callable
from uuid import uuid4

IdFactory = Callable[[], str]


def generate_id() -> str:
    return str(uuid4())
