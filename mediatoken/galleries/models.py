"""Gallery data models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Gallery:
    name: str
    title: str
    resources: list[str] = field(default_factory=list)
