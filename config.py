from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Optional


DEFAULT_MAX_COORDINATE = 50
DEFAULT_SAMPLE_PATH = "sample.txt"


@dataclass(frozen=True)
class RobotsConfig:
    max_coordinate: int = DEFAULT_MAX_COORDINATE
    # None leaves instruction lines unbounded.
    max_instructions: Optional[int] = None
    sample_path: str = DEFAULT_SAMPLE_PATH
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.max_coordinate < 0:
            raise ValueError("max_coordinate must be non-negative")
        if self.max_instructions is not None and self.max_instructions < 0:
            raise ValueError("max_instructions must be non-negative")

    def with_overrides(self, **overrides: Any) -> "RobotsConfig":
        """Return a copy with the given fields replaced; None values are ignored."""
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})
