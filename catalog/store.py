"""
catalog/store.py -- SQLAlchemy-backed persistence layer for products.

Uses SQLAlchemy Core (not ORM) so the Product dataclass remains the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ProductStore is the repository,
_row_to_product the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ProductStore("sqlite:///shopfront.db")
    product_id = store.create_product(Product(title="Mug", price="9.99"))
    store.update_product(product_id, price="7.99")
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from catalog.models import Product
from core.ids import new_id

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_products = Table(
    "products",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("price", String(64), nullable=False),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_MUTABLE_FIELDS = {"title", "price", "description"}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode; PRAGMAs are per-connection in SQLite."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProductStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def create_product(self, product: Product) -> str:
        """Insert a product and return its generated id."""
        product_id = new_id()
        now = _now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _products.insert().values(
                    id=product_id,
                    title=product.title,
                    price=product.price,
                    description=product.description,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return product_id

    def get_product(self, product_id: str) -> Optional[Product]:
        with self.engine.connect() as conn:
            row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
        return _row_to_product(row) if row is not None else None

    def list_products(self) -> list[Product]:
        with self.engine.connect() as conn:
            rows = conn.execute(_products.select().order_by(_products.c.created_at, _products.c.id)).fetchall()
        return [_row_to_product(r) for r in rows]

    def update_product(self, product_id: str, **fields) -> bool:
        """Update title, price and/or description. Returns False if product_id is unknown.

        None values are skipped, so a partial update leaves other fields alone.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown product fields: {unknown!r}")
        values = {k: v for k, v in fields.items() if v is not None}
        values["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_products.update().where(_products.c.id == product_id).values(**values))
            conn.commit()
        return result.rowcount > 0

    def delete_product(self, product_id: str) -> Optional[Product]:
        """Delete a product and return the deleted record, or None if it did not exist."""
        with self.engine.begin() as conn:
            row = conn.execute(_products.select().where(_products.c.id == product_id)).fetchone()
            if row is None:
                return None
            conn.execute(_products.delete().where(_products.c.id == product_id))
        return _row_to_product(row)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_product(row) -> Product:
    return Product(
        id=row.id,
        title=row.title,
        price=row.price,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
