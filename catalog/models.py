"""
catalog/models.py -- Domain dataclass for the product catalog.

Pure data container with zero logic. Persistence lives in catalog/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Product:
    """A catalog entry.

    price is kept as the string the client sent; no currency or numeric
    handling is applied. id is None before the record is written.
    """

    title: str
    price: str
    description: Optional[str] = None
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""
