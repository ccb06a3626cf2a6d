"""
# `rakhimart/routers/products.py` - Products

## Public

### `GET /products/`
Paginated listing: `page` (1-based), `limit` (default `PRODUCTS_PAGE_SIZE`), `category`
(category id, or `All`). Optional storefront filters: `search`, `min_price`, `max_price`,
`sort` (`default | price-low | price-high | name | rating | newest`).
Response: `{products, count, totalPages, currentPage}`.

### `GET /products/{product_id}`
Single product, 404 if missing.

## Admin (`/admin/products`)

- `POST /` multipart: product fields + `images` (at least one). 400 without images.
- `PUT /{product_id}` multipart: same fields; new `images` replace the old ones, none keeps them.
- `DELETE /{product_id}`
- `PATCH /{product_id}/toggle-stock` flips `is_out_of_stock`.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from rakhimart.config import get_bucket, get_db, settings
from rakhimart.core.security import get_current_admin
from rakhimart.integrations.media import MediaHost
from rakhimart.repositories.catalog import CategoryRepository, ProductRepository
from rakhimart.schemas.product import ProductCreate, ProductOut, ProductPage, ProductUpdate
from rakhimart.services.catalog_filters import SORT_KEYS


def get_product_repo(db=Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)


def get_media_host() -> MediaHost:
    return MediaHost(get_bucket())


router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/", response_model=ProductPage, summary="List Products")
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.products_page_size, ge=1, le=100),
    category: Optional[str] = Query(None, description="Category id, or 'All'"),
    search: str = Query("", description="Matches name or description"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort: str = Query("default"),
    repo: ProductRepository = Depends(get_product_repo),
):
    if sort != "default" and sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"Unknown sort '{sort}'")
    return repo.list_page(
        page=page, limit=limit, category=category,
        search=search, min_price=min_price, max_price=max_price, sort_by=sort,
    )


@router.get("/{product_id}", response_model=ProductOut, summary="Get Product")
def get_product(product_id: str, repo: ProductRepository = Depends(get_product_repo)):
    product = repo.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# Admin sub-router for product management
admin_router = APIRouter(prefix="/products", tags=["Admin: Products"], dependencies=[Depends(get_current_admin)])


def _require_category(db, category_id: str) -> None:
    if CategoryRepository(db).get(category_id) is None:
        raise HTTPException(status_code=404, detail="Category not found")


def _real_files(files: Optional[List[UploadFile]]) -> List[UploadFile]:
    return [f for f in (files or []) if f and f.filename]


@admin_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED, summary="Create Product")
def create_product(
    product_in: ProductCreate = Depends(ProductCreate.as_form),
    images: Optional[List[UploadFile]] = File(None, description="At least one product image"),
    db=Depends(get_db),
    repo: ProductRepository = Depends(get_product_repo),
    media: MediaHost = Depends(get_media_host),
):
    uploads = _real_files(images)
    if not uploads:
        raise HTTPException(status_code=400, detail="At least one image is required")
    _require_category(db, product_in.category_id)

    product_id = repo.new_id()
    urls = media.upload_all(product_id, uploads)
    return repo.create(product_id, product_in, urls)


@admin_router.put("/{product_id}", response_model=ProductOut, summary="Update Product")
def update_product(
    product_id: str,
    product_in: ProductUpdate = Depends(ProductUpdate.as_form),
    images: Optional[List[UploadFile]] = File(None),
    db=Depends(get_db),
    repo: ProductRepository = Depends(get_product_repo),
    media: MediaHost = Depends(get_media_host),
):
    if repo.get(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    _require_category(db, product_in.category_id)

    uploads = _real_files(images)
    urls = media.upload_all(product_id, uploads) if uploads else None
    return repo.replace(product_id, product_in, urls)


@admin_router.delete("/{product_id}", summary="Delete Product")
def delete_product(product_id: str, repo: ProductRepository = Depends(get_product_repo)):
    if not repo.delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted"}


@admin_router.patch("/{product_id}/toggle-stock", response_model=ProductOut, summary="Toggle Out-of-Stock")
def toggle_stock(product_id: str, repo: ProductRepository = Depends(get_product_repo)):
    product = repo.toggle_stock(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
