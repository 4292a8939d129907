"""Merge keyword lists from several sources into one unique collection."""

from __future__ import annotations

from collections.abc import Iterable

from .models import MergedKeyword, RawKeyword


def normalize_keyword(keyword: str) -> str:
    """Caseless, whitespace-collapsed comparison key for a keyword."""
    return " ".join(keyword.split()).casefold()


def merge_keywords(*sources: Iterable[RawKeyword]) -> list[MergedKeyword]:
    """Deduplicate keywords across lists, keeping the highest-volume variant.

    On equal volume the earliest-seen variant wins. Each unique keyword keeps
    the position where it was first seen. The survivor's ``source`` is kept
    as-is; ``sources`` lists every label that reported the keyword.
    """
    winners: dict[str, RawKeyword] = {}
    labels: dict[str, list[str]] = {}

    for keywords in sources:
        for keyword in keywords:
            key = normalize_keyword(keyword.keyword)
            if not key:
                continue
            current = winners.get(key)
            if current is None or keyword.volume > current.volume:
                winners[key] = keyword
            seen = labels.setdefault(key, [])
            if keyword.source and keyword.source not in seen:
                seen.append(keyword.source)

    return [
        MergedKeyword(
            **winner.model_dump(include=set(RawKeyword.model_fields)),
            sources=tuple(labels[key]),
        )
        for key, winner in winners.items()
    ]
