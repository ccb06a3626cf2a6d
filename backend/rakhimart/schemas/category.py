# rakhimart/schemas/category.py
from pydantic import BaseModel, Field

# ---------- input ----------
class CategoryIn(BaseModel):
    """Admin => create / update a category."""
    name: str = Field(..., min_length=1, description="Category name")
    description: str = Field("", description="Description (optional)")

# ---------- output ----------
class CategoryOut(BaseModel):
    id: str
    name: str
    description: str = ""
