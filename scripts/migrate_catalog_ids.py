"""Rewrite missing, slug-style and duplicate catalog variant IDs to UUIDs.

Runs the same normalisation pass the admin product list performs, without
starting the API. Useful before a deploy that drops legacy ID matching.

Usage:
    python -m scripts.migrate_catalog_ids data/pricing-data.json
    python -m scripts.migrate_catalog_ids data/pricing-data.json --dry-run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.catalog.errors import CatalogUnavailable
from src.catalog.service import CatalogService, pending_id_fixes


def migrate(path: Path, *, dry_run: bool = False) -> int:
    """Normalise IDs in the catalog at ``path``; returns how many changed."""
    service = CatalogService.from_path(path)
    pending = pending_id_fixes(service.load_catalog())
    if pending and not dry_run:
        service.list_all_variants()
    return len(pending)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Normalise pricing catalog variant IDs to UUIDs",
    )
    parser.add_argument("path", type=Path, help="Path to pricing-data.json")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many IDs would change without writing",
    )
    args = parser.parse_args(argv)

    try:
        count = migrate(args.path, dry_run=args.dry_run)
    except CatalogUnavailable as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.dry_run:
        print(f"{count} variant IDs would be rewritten in {args.path}")
    else:
        print(f"Rewrote {count} variant IDs in {args.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
