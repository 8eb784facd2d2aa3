from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ShiftTemplate:
    """Domain entity: a named weekly shift pattern.

    `tz_string` holds seven `HHMMHHMM` segments, Sunday first.
    `buffer_minutes` of None means "use the company default".
    """

    template_id: int
    name: str
    tz_string: str
    buffer_minutes: Optional[int] = None
