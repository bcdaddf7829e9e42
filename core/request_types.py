"""Shared request data types."""

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    route_name: str
    method: str
    target_url: str
    headers: dict[str, str]
    timeout: float
    params: list[tuple[str, str]] = field(default_factory=list)
    body: Any = None
    request_id: str = field(default_factory=lambda: uuid4().hex)
