"""
src/core/catalog.py
====================
ProductCatalog: CRUD over products.json.

Records are plain dicts: `id` is the only field the catalog interprets, every
other key is stored and returned as given. Ids are assigned as
max(existing ids, default 0) + 1, so an id is never handed out twice while
higher ids still exist.

Every operation does a fresh load → modify → save cycle under the store's
transaction lock; nothing is cached between calls.
"""

from __future__ import annotations

import copy
import logging

from src.core.config     import Settings
from src.core.errors     import NotFoundError
from src.core.file_store import JsonFileStore

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS: list[dict] = [
    {
        "id":       1,
        "name":     "Espelho Oval de Parede Com Led Quente/Frio",
        "price":    "R$ 89,90",
        "category": "cozinha",
        "image":    "/assets/produtos/espelho01.jpg",
        "tag":      "Mais vendido",
        "url":      "https://s.shopee.com.br/2B5oQoJyeQ",
    },
]


def _numeric_id(record: dict) -> int:
    value = record.get("id")
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def next_id(records: list[dict]) -> int:
    """max(existing ids) + 1, or 1 for an empty collection."""
    return max((_numeric_id(r) for r in records), default=0) + 1


class ProductCatalog:

    def __init__(self, settings: Settings) -> None:
        self.store = JsonFileStore(
            settings.products_file,
            seed           = lambda: copy.deepcopy(SAMPLE_PRODUCTS),
            label          = "products.json",
            backup_corrupt = settings.backup_corrupt,
        )

    def list(self) -> list[dict]:
        return self.store.load().records

    def get(self, product_id: int) -> dict:
        for record in self.store.load().records:
            if _numeric_id(record) == product_id:
                return record
        raise NotFoundError("Product not found.", code="product_not_found")

    def create(self, fields: dict) -> dict:
        """Append a new record; the assigned id overrides any caller-supplied id."""
        with self.store.transaction():
            records = self.store.load().records
            record  = {**fields, "id": next_id(records)}
            records.append(record)
            self.store.save(records)
        logger.info("Product %d created", record["id"])
        return record

    def update(self, product_id: int, fields: dict) -> dict:
        """Shallow-merge fields onto an existing record; id stays pinned."""
        with self.store.transaction():
            records = self.store.load().records
            for idx, record in enumerate(records):
                if _numeric_id(record) == product_id:
                    break
            else:
                raise NotFoundError("Product not found.", code="product_not_found")

            merged       = {**record, **fields, "id": product_id}
            records[idx] = merged
            self.store.save(records)
        logger.info("Product %d updated", product_id)
        return merged

    def delete(self, product_id: int) -> None:
        with self.store.transaction():
            records   = self.store.load().records
            remaining = [r for r in records if _numeric_id(r) != product_id]
            if len(remaining) == len(records):
                raise NotFoundError("Product not found.", code="product_not_found")
            self.store.save(remaining)
        logger.info("Product %d deleted", product_id)
