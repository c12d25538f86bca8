# config.py
"""
This module defines the data structures for our configuration.
Scale set entries are kept as plain dictionaries here; they are validated
against the pydantic block models in scaleset.py when the builder expands them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

@dataclass
class ScaleSetConfig:
    name: str
    settings: Dict[str, Any]

@dataclass
class Config:
    team: str
    service: str
    environment: str
    location: str
    tags: Dict[str, str] = field(default_factory=dict)
    scale_sets: List[ScaleSetConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        scale_sets = []
        for entry in data.get("scale_sets") or []:
            if not isinstance(entry, dict) or "name" not in entry:
                raise ValueError(f"Every scale set entry needs a 'name', got: {entry!r}")
            scale_sets.append(ScaleSetConfig(name=entry["name"], settings=dict(entry)))

        return cls(
            team=data["team"],
            service=data["service"],
            environment=data["environment"],
            location=data["location"],
            tags=dict(data.get("tags") or {}),
            scale_sets=scale_sets,
        )
