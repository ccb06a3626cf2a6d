# rakhimart/routers/categories.py
"""
Category management
- Public: GET /categories/        → all categories
- Admin : /admin/categories       → create / update / delete
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from rakhimart.config import get_db
from rakhimart.core.security import get_current_admin
from rakhimart.repositories.catalog import CategoryRepository
from rakhimart.schemas.category import CategoryIn, CategoryOut


def get_category_repo(db=Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)


# ---------- Public ----------
router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[CategoryOut])
def list_categories(response: Response, repo: CategoryRepository = Depends(get_category_repo)):
    response.headers["Cache-Control"] = "public, max-age=60"
    return repo.list()


# ---------- Admin ----------
admin_router = APIRouter(prefix="/categories", tags=["Admin: Categories"], dependencies=[Depends(get_current_admin)])


@admin_router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryIn, repo: CategoryRepository = Depends(get_category_repo)):
    return repo.create(body)


@admin_router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: str, body: CategoryIn, repo: CategoryRepository = Depends(get_category_repo)):
    updated = repo.update(category_id, body)
    if updated is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated


@admin_router.delete("/{category_id}")
def delete_category(category_id: str, repo: CategoryRepository = Depends(get_category_repo)):
    if not repo.delete(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"message": "Category deleted"}
