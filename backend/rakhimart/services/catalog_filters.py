# rakhimart/services/catalog_filters.py
from typing import Iterable, List, Optional

from rakhimart.schemas.product import ProductOut

SORT_KEYS = {
    "price-low": (lambda p: p.price, False),
    "price-high": (lambda p: p.price, True),
    "name": (lambda p: p.name.lower(), False),
    "rating": (lambda p: p.rating, True),
    "newest": (lambda p: p.created_at or "", True),
}


def filter_products(
    products: Iterable[ProductOut],
    search: str = "",
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort_by: str = "default",
) -> List[ProductOut]:
    """
    Storefront list filtering: case-insensitive search over name and description,
    inclusive price range, then a stable sort ("default" keeps catalog order).
    """
    needle = (search or "").strip().lower()
    out = []
    for p in products:
        if needle and needle not in p.name.lower() and needle not in (p.description or "").lower():
            continue
        if min_price is not None and p.price < min_price:
            continue
        if max_price is not None and p.price > max_price:
            continue
        out.append(p)

    if sort_by in SORT_KEYS:
        key, reverse = SORT_KEYS[sort_by]
        out.sort(key=key, reverse=reverse)
    elif sort_by != "default":
        raise ValueError(f"unknown sort: {sort_by}")
    return out
