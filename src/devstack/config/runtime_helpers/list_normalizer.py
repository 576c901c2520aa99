"""List normalization utilities for environment variables."""

from __future__ import annotations

from typing import Sequence


class ListNormalizer:
    """Normalizes delimited list values from environment variables."""

    @staticmethod
    def split_and_normalize(raw_value: str, separator: str, strip_items: bool) -> list[str]:
        """Split ``raw_value`` on ``separator`` and drop blank items when stripping."""
        parts = raw_value.split(separator) if separator else [raw_value]
        normalized: list[str] = []
        for item in parts:
            candidate = item.strip() if strip_items else item
            if strip_items and candidate == "":
                continue
            normalized.append(candidate)
        return normalized

    @staticmethod
    def deduplicate_preserving_order(items: Sequence[str]) -> tuple[str, ...]:
        """Remove duplicates while preserving first-seen order."""
        seen: set[str] = set()
        deduped: list[str] = []
        for item in items:
            if item not in seen:
                deduped.append(item)
                seen.add(item)
        return tuple(deduped)
