"""
Export a user's deck to JSON, or restore it from a JSON backup.

Restoring migrates SM-2 era cards (ease factor / interval / repetitions)
to FSRS fields and repairs integrity issues before saving.

Usage:
    python -m scripts.data.deck_backup export backups/deck.json
    python -m scripts.data.deck_backup import backups/deck.json [--dry-run]
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import TypeAdapter

from deckcore import config
from deckcore.cards import Card
from deckcore.fsrs.database import SqlCardStore, get_engine, init_db
from deckcore.maintenance import migrate_legacy_card, repair_cards
from deckcore.schemas import CardDocument

logger = logging.getLogger(__name__)

CARD_LIST = TypeAdapter(list[CardDocument])


def export_deck(store: SqlCardStore, path: Path) -> int:
    """Write every card of the store to `path`; returns the card count."""
    documents = [CardDocument.from_card(card) for card in store.get_all()]
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(
            [doc.model_dump(mode="json", exclude_none=True) for doc in documents],
            f,
            ensure_ascii=False,
            indent=2,
        )
    return len(documents)


def load_backup(path: Path) -> list[Card]:
    """
    Read a JSON backup into cards (legacy cards migrated, integrity repaired).

    Cards keep the file order as their relative order.
    """
    with open(path, 'r', encoding='utf-8') as f:
        documents = CARD_LIST.validate_python(json.load(f))

    legacy = sum(1 for doc in documents if doc.is_legacy)
    if legacy:
        logger.info("Migrating %d legacy SM-2 cards", legacy)

    cards = []
    for index, doc in enumerate(documents):
        card = migrate_legacy_card(doc).to_card()
        card.position = index
        cards.append(card)
    return repair_cards(cards).cards


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export or restore a deck backup")
    parser.add_argument("command", choices=["export", "import"])
    parser.add_argument("path", type=Path)
    parser.add_argument("--dry-run", action="store_true", help="Import: validate without saving")
    parser.add_argument("--user", default=None, help="User id (default: DEFAULT_USER_ID)")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    engine = get_engine(args.database_url)
    init_db(engine)
    store = SqlCardStore(engine, args.user or config.get_default_user_id())

    if args.command == "export":
        count = export_deck(store, args.path)
        print(f"Exported {count} cards to {args.path}")
        return 0

    if not args.path.exists():
        print(f"No backup file found at: {args.path}")
        return 1

    cards = load_backup(args.path)
    if args.dry_run:
        print(f"[DRY RUN] Would restore {len(cards)} cards from {args.path}")
        return 0

    store.save_all(cards)
    print(f"Restored {len(cards)} cards from {args.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
