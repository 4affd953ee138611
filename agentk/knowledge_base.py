"""Knowledge-base loading."""

import json
from pathlib import Path
from typing import Any

from .config import config
from .models import KnowledgeBase, KnowledgeEntry

logger = config.get_logger(__name__)


class KnowledgeBaseLoader:
    """Loads the curated Q&A file into an immutable knowledge base."""

    @staticmethod
    def parse_entry(raw: Any) -> KnowledgeEntry | None:
        """Build a KnowledgeEntry from one JSON record.

        Returns:
            The entry, or None if the record lacks a question or answer.
        """
        if not isinstance(raw, dict):
            return None
        question = str(raw.get("question") or "").strip()
        answer = str(raw.get("answer") or "").strip()
        if not question or not answer:
            return None

        keywords = raw.get("keywords") or []
        if isinstance(keywords, str):
            keywords = [keywords]
        category = raw.get("category")
        return KnowledgeEntry(
            question=question,
            answer=answer,
            keywords=tuple(str(k).strip() for k in keywords if str(k).strip()),
            category=str(category) if category else None,
        )

    @classmethod
    def parse(cls, data: Any) -> KnowledgeBase:
        """Convert decoded JSON into a knowledge base.

        Accepts either ``{"qaDatabase": [...]}`` or a bare list of records.

        Returns:
            Tuple of entries in file order.
        """
        records = data.get("qaDatabase", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            logger.warning("Knowledge base has no list of records; using empty base")
            return ()

        entries = []
        for position, raw in enumerate(records):
            entry = cls.parse_entry(raw)
            if entry is None:
                logger.warning("Skipping malformed knowledge base record %d", position)
                continue
            entries.append(entry)
        return tuple(entries)

    @classmethod
    def load(cls, file_path: Path) -> KnowledgeBase:
        """Load the knowledge base from a JSON file.

        A missing or unreadable file is logged and yields an empty knowledge
        base so the service can still start.

        Returns:
            Tuple of entries, possibly empty.
        """
        try:
            with Path(file_path).open(encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to load knowledge base from %s", file_path)
            return ()

        knowledge_base = cls.parse(data)
        logger.info("Loaded %d Q&A entries", len(knowledge_base))
        return knowledge_base
