"""
# `rakhimart/schemas/product.py` - Product schemas

## Input

### `ProductCreate`
Admin form for new products (multipart, images sent alongside).
| Field            | Type        | Required | Notes |
|------------------|-------------|----------|-------|
| name             | `str`       | ✔        | Product name |
| price            | `float`     | ✔        | Price (>0) |
| category_id      | `str`       | ✔        | Category document id |
| description      | `str`       | ✖        | |
| stock            | `int`       | ✖        | Units available (default 0) |
| is_out_of_stock  | `bool`      | ✖        | Manual out-of-stock flag |
| specifications   | `list[str]` | ✖        | Sent as a JSON array string in form-data |
| materials        | `str`       | ✖        | |
| occasion         | `str`       | ✖        | |

`ProductUpdate` uses the same fields (PUT replaces them).

## Output

### `ProductOut`
Catalog product as the storefront sees it; also the snapshot the cart engine adds from.
`category_name` is resolved from the category document.

### `ProductPage`
`{products, count, totalPages, currentPage}` for paginated listing.
"""
import json
from typing import List, Optional

from fastapi import Form, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field, ValidationError


def _parse_specifications(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="specifications must be a JSON array of strings")
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail="specifications must be a JSON array of strings")
    return [str(v) for v in value]


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., gt=0, description="Price")
    category_id: str = Field(..., min_length=1, description="Category id")
    description: str = Field("", description="Description")
    stock: int = Field(0, ge=0, description="Stock")
    is_out_of_stock: bool = Field(False, description="Manually flagged out of stock")
    specifications: List[str] = Field(default_factory=list)
    materials: str = ""
    occasion: str = ""

    # Form-data support
    @classmethod
    def as_form(
        cls,
        name: str = Form(...),
        price: float = Form(...),
        category_id: str = Form(...),
        description: str = Form(""),
        stock: int = Form(0),
        is_out_of_stock: bool = Form(False),
        specifications: Optional[str] = Form(None),
        materials: str = Form(""),
        occasion: str = Form(""),
    ):
        try:
            return cls(
                name=name,
                price=price,
                category_id=category_id,
                description=description,
                stock=stock,
                is_out_of_stock=is_out_of_stock,
                specifications=_parse_specifications(specifications),
                materials=materials,
                occasion=occasion,
            )
        except ValidationError as exc:
            raise RequestValidationError(exc.errors())


class ProductUpdate(ProductCreate):
    """Same shape as creation; PUT replaces every field, images only when new files are sent."""


class ProductOut(BaseModel):
    id: str
    name: str
    price: float
    images: List[str] = []
    description: str = ""
    category_id: str = ""
    category_name: str = ""
    stock: int = 0
    is_out_of_stock: bool = False
    specifications: List[str] = []
    materials: str = ""
    occasion: str = ""
    rating: float = 0
    created_at: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductPage(BaseModel):
    products: List[ProductOut]
    count: int
    totalPages: int
    currentPage: int
