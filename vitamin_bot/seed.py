"""
Seed the catalog and knowledge base from the JSON files in `vitamin_bot/data/`.

    vitabot-seed            # wipe products + knowledge base, insert everything
    vitabot-seed --no-reset # only seed when the catalog is empty
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import ValidationError
from .logging_setup import setup_logging
from .schemas import build_knowledge_entry, build_product
from .store import MongoStore, open_store

log = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
MAX_RELATED_PRODUCTS = 3


def load_seed_file(name: str) -> List[Dict[str, Any]]:
    with open(DATA_DIR / name, encoding="utf-8") as fh:
        return json.load(fh)


def related_product_ids(keywords: List[str], products: List[Dict[str, Any]],
                        limit: int = MAX_RELATED_PRODUCTS) -> List[Any]:
    """Products whose tags contain one of the keywords, or whose name mentions one."""
    keywords = [k.lower() for k in keywords]
    related = []
    for product in products:
        tags = product.get("tags") or []
        name = (product.get("name") or "").lower()
        if any(k in tags or k in name for k in keywords):
            related.append(product["_id"])
            if len(related) >= limit:
                break
    return related


def seed_database(store: MongoStore, reset: bool = True,
                  products: Optional[List[Dict[str, Any]]] = None,
                  knowledge: Optional[List[Dict[str, Any]]] = None) -> Dict[str, int]:
    products = products if products is not None else load_seed_file("products.json")
    knowledge = knowledge if knowledge is not None else load_seed_file("knowledge.json")

    # Validate everything before touching the database
    product_docs = [build_product(p) for p in products]
    knowledge_docs = [build_knowledge_entry(entry) for entry in knowledge]

    if reset:
        removed_products = store.delete_all_products()
        removed_entries = store.delete_all_knowledge()
        log.info(f"🧹 SEED_RESET | products={removed_products} | knowledge_entries={removed_entries}")
    else:
        existing = store.count_products()
        if existing > 0:
            log.info(f"⚠️ SEED_SKIPPED | existing_products={existing}")
            return {"products": 0, "knowledge_entries": 0}

    for doc, oid in zip(product_docs, store.insert_products(product_docs)):
        doc["_id"] = oid
    log.info(f"📦 SEED_PRODUCTS | inserted={len(product_docs)}")

    inserted_entries = 0
    for doc in knowledge_docs:
        doc["related_products"] = related_product_ids(doc.get("keywords") or [], product_docs)
        store.insert_knowledge(doc)
        inserted_entries += 1
    log.info(f"📚 SEED_KNOWLEDGE | inserted={inserted_entries}")

    return {"products": len(product_docs), "knowledge_entries": inserted_entries}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="vitabot-seed", description="Seed the VitaBot product catalog and knowledge base.")
    parser.add_argument("--no-reset", action="store_true", help="keep existing data; skip seeding if products exist")
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging()

    store = open_store()
    if store is None:
        print("Error: MONGODB_URI is not configured or the database is unreachable.")
        return 1

    try:
        counts = seed_database(store, reset=not args.no_reset)
    except ValidationError as e:
        print(f"Error: seed data failed validation: {e}")
        return 1

    print(f"Seeded {counts['products']} products and {counts['knowledge_entries']} knowledge entries.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
