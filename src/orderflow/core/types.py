"""Type aliases used across orderflow."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
