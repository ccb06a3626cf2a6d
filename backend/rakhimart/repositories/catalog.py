"""
# `rakhimart/repositories/catalog.py` - Products and categories in Firestore

Collections (prefix-aware): `categories/{id}`, `products/{id}`.

- Product documents store `category_id`; `category_name` is resolved on read so renaming a
  category shows up everywhere without rewriting products.
- Listing streams the collection and paginates with offset math
  (`skip = (page - 1) * limit`); the catalog is a few hundred documents at most.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

from rakhimart.config import settings
from rakhimart.schemas.category import CategoryIn, CategoryOut
from rakhimart.schemas.product import ProductCreate, ProductOut, ProductPage
from rakhimart.services.catalog_filters import filter_products

logger = logging.getLogger("rakhimart.catalog")

ALL_CATEGORIES = "All"


class CategoryRepository:
    def __init__(self, db):
        self._col = db.collection(settings.collection("categories"))

    def list(self) -> List[CategoryOut]:
        out = []
        for snap in self._col.stream():
            data = snap.to_dict() or {}
            out.append(CategoryOut(id=snap.id, name=data.get("name", ""), description=data.get("description", "")))
        return out

    def names(self) -> Dict[str, str]:
        return {c.id: c.name for c in self.list()}

    def get(self, category_id: str) -> Optional[CategoryOut]:
        snap = self._col.document(category_id).get()
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        return CategoryOut(id=snap.id, name=data.get("name", ""), description=data.get("description", ""))

    def create(self, body: CategoryIn) -> CategoryOut:
        ref = self._col.document()
        ref.set(body.model_dump())
        logger.info("category created: %s (%s)", body.name, ref.id)
        return CategoryOut(id=ref.id, **body.model_dump())

    def update(self, category_id: str, body: CategoryIn) -> Optional[CategoryOut]:
        ref = self._col.document(category_id)
        if not ref.get().exists:
            return None
        ref.set(body.model_dump())
        return CategoryOut(id=category_id, **body.model_dump())

    def delete(self, category_id: str) -> bool:
        ref = self._col.document(category_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True


class ProductRepository:
    def __init__(self, db):
        self._col = db.collection(settings.collection("products"))
        self._categories = CategoryRepository(db)

    def _out(self, doc_id: str, data: dict, names: Dict[str, str]) -> ProductOut:
        cat_id = str(data.get("category_id") or "")
        return ProductOut(
            id=doc_id,
            name=data.get("name", ""),
            price=float(data.get("price", 0) or 0),
            images=list(data.get("images") or []),
            description=data.get("description", "") or "",
            category_id=cat_id,
            category_name=names.get(cat_id, ""),
            stock=int(data.get("stock", 0) or 0),
            is_out_of_stock=bool(data.get("is_out_of_stock", False)),
            specifications=list(data.get("specifications") or []),
            materials=data.get("materials", "") or "",
            occasion=data.get("occasion", "") or "",
            rating=float(data.get("rating", 0) or 0),
            created_at=data.get("created_at"),
        )

    def list_page(self, page: int = 1, limit: int = 12, category: Optional[str] = None,
                  search: str = "", min_price: Optional[float] = None, max_price: Optional[float] = None,
                  sort_by: str = "default") -> ProductPage:
        names = self._categories.names()
        docs = [(snap.id, snap.to_dict() or {}) for snap in self._col.stream()]
        if category and category != ALL_CATEGORIES:
            docs = [(i, d) for i, d in docs if str(d.get("category_id") or "") == category]
        docs.sort(key=lambda pair: pair[1].get("created_at") or "")
        matching = filter_products(
            (self._out(i, d, names) for i, d in docs),
            search=search, min_price=min_price, max_price=max_price, sort_by=sort_by,
        )

        count = len(matching)
        skip = (page - 1) * limit
        products = matching[skip:skip + limit]
        return ProductPage(
            products=products,
            count=count,
            totalPages=math.ceil(count / limit),
            currentPage=page,
        )

    def get(self, product_id: str) -> Optional[ProductOut]:
        snap = self._col.document(product_id).get()
        if not snap.exists:
            return None
        return self._out(snap.id, snap.to_dict() or {}, self._categories.names())

    def new_id(self) -> str:
        return self._col.document().id

    def create(self, product_id: str, body: ProductCreate, images: List[str]) -> ProductOut:
        data = body.model_dump()
        data.update(
            images=images,
            rating=0,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._col.document(product_id).set(data)
        logger.info("product created: %s (%s)", body.name, product_id)
        return self._out(product_id, data, self._categories.names())

    def replace(self, product_id: str, body: ProductCreate, images: Optional[List[str]]) -> Optional[ProductOut]:
        ref = self._col.document(product_id)
        snap = ref.get()
        if not snap.exists:
            return None
        current = snap.to_dict() or {}
        data = {**current, **body.model_dump()}
        if images:
            data["images"] = images
        ref.set(data)
        return self._out(product_id, data, self._categories.names())

    def toggle_stock(self, product_id: str) -> Optional[ProductOut]:
        ref = self._col.document(product_id)
        snap = ref.get()
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        data["is_out_of_stock"] = not bool(data.get("is_out_of_stock", False))
        ref.update({"is_out_of_stock": data["is_out_of_stock"]})
        return self._out(product_id, data, self._categories.names())

    def delete(self, product_id: str) -> bool:
        ref = self._col.document(product_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True
