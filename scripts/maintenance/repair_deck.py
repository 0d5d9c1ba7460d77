"""
Repair data-integrity issues in a user's deck.

Fixes cards that break the scheduling invariants:
  - new cards that carry a due date
  - reviewed cards without stability or due date (reset to new)

Usage:
    # Repair the default user's deck
    python -m scripts.maintenance.repair_deck

    # Dry run - show what would be repaired
    python -m scripts.maintenance.repair_deck --dry-run

    # Another user / database
    python -m scripts.maintenance.repair_deck --user alice --database-url sqlite:///deck.db
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from deckcore import config
from deckcore.fsrs.database import SqlCardStore, get_engine, init_db
from deckcore.maintenance import repair_cards

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Repair deck data-integrity issues")
    parser.add_argument("--dry-run", action="store_true", help="Report without saving")
    parser.add_argument("--user", default=None, help="User id (default: DEFAULT_USER_ID)")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    engine = get_engine(args.database_url)
    init_db(engine)
    store = SqlCardStore(engine, args.user or config.get_default_user_id())

    cards = store.get_all()
    report = repair_cards(cards)

    if not report.fixed:
        print(f"Deck looks healthy! Checked {len(cards)} cards, no repairs needed.")
        return 0

    for card_id in report.fixed_ids:
        print(f"  - {card_id}")

    if args.dry_run:
        print(f"[DRY RUN] Would repair {report.fixed} of {len(cards)} cards.")
        return 0

    fixed_ids = set(report.fixed_ids)
    changed = [card for card in report.cards if card.id in fixed_ids]
    store.save_all(changed)
    print(f"Repaired {report.fixed} of {len(cards)} cards.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
