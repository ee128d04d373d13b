"""
Query engine for Tagfolio.

Narrows one owner's records with two predicates:
- Free text: case-insensitive substring of title, description or any tag
- Tag filter: every requested tag present, matched exactly (AND)

Records keep the order RecordStore.list_by_owner gives them.
"""

from typing import Iterable, Optional, Sequence

from loguru import logger

from tagfolio.storage import RecordStore, StoredRecord


def parse_tag_filter(raw: Optional[str]) -> list[str]:
    """Split a comma-separated tag list, dropping blank entries."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def matches_text(record: StoredRecord, term: str) -> bool:
    """term must already be lower-cased."""
    if not term:
        return True
    if term in record.title.lower() or term in record.description.lower():
        return True
    return any(term in tag.lower() for tag in record.tags)


def matches_tags(record: StoredRecord, required: Sequence[str]) -> bool:
    if not required:
        return True
    present = set(record.tags)
    return all(tag in present for tag in required)


class QueryEngine:
    """
    Text and tag search over an owner's records.

    Usage:
        engine = QueryEngine(record_store)
        engine.search(owner_id, "mustang", ["classic"])
    """

    def __init__(self, records: RecordStore):
        self.records = records

    def search(
        self,
        owner_id: str,
        query_text: Optional[str] = "",
        tag_filter: Optional[Iterable[str]] = None,
    ) -> list[StoredRecord]:
        """
        Search one owner's records.

        Args:
            owner_id: Owner whose records are searched
            query_text: Free-text term; empty matches everything
            tag_filter: Tags that must all be present; empty matches everything

        Returns:
            Matching records, most recently updated first
        """
        candidates = self.records.list_by_owner(owner_id)

        term = (query_text or "").lower()
        required = list(tag_filter or [])

        if not term and not required:
            return candidates

        results = [
            record for record in candidates
            if matches_text(record, term) and matches_tags(record, required)
        ]

        logger.debug(
            f"Search owner={owner_id} q={query_text!r} tags={required}: "
            f"{len(results)}/{len(candidates)}"
        )
        return results
