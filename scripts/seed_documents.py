#!/usr/bin/env python3
"""
Seed the Milvus collection the vector_search tool reads from.

Loads project JSON, location CSV and markdown doc files, embeds them via the HF
Inference API and inserts them with their source tag. Use --reset to drop the
collection first.

Run from project root:

    python scripts/seed_documents.py data/projects.json data/locations.csv docs/compliance.md
    python scripts/seed_documents.py --reset data/*.json
"""

import argparse
import logging
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from swappy.core.config import Settings
from swappy.ingest.loader import load_path
from swappy.services.vector_store import clear_collection, store_documents


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the document collection for vector_search.")
    parser.add_argument("paths", nargs="+", help=".json, .csv or .md files to load.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop the collection before inserting.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    settings = Settings.from_env()
    if args.reset:
        clear_collection(settings)
        print(f"Dropped collection {settings.collection_name}.")

    total = 0
    for path in args.paths:
        docs = load_path(path)
        stored = store_documents(docs, settings)
        total += stored
        print(f"  {path}: {stored} documents")

    print(f"Done. Seeded {total} documents into {settings.collection_name}.")


if __name__ == "__main__":
    main()
