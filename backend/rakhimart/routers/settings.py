"""
Site settings router
- Public: GET /settings          → site settings (default document is created on first read)
- Admin : PUT /admin/settings    → update; empty fields keep their stored value
- Public: GET /settings/pricing  → delivery fee / free-delivery minimum as the cart prices them
"""
from fastapi import APIRouter, Depends

from rakhimart.config import get_db
from rakhimart.core.security import get_current_admin
from rakhimart.repositories.site_settings import SiteSettingsRepository
from rakhimart.schemas.cart import PricingConfig
from rakhimart.schemas.settings import SiteSettings, SiteSettingsUpdate


def get_settings_repo(db=Depends(get_db)) -> SiteSettingsRepository:
    return SiteSettingsRepository(db)


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/", response_model=SiteSettings)
def get_site_settings(repo: SiteSettingsRepository = Depends(get_settings_repo)):
    return repo.get()


@router.get("/pricing", response_model=PricingConfig)
def get_pricing(repo: SiteSettingsRepository = Depends(get_settings_repo)):
    return repo.pricing_config()


admin_router = APIRouter(prefix="/settings", tags=["Admin: Settings"], dependencies=[Depends(get_current_admin)])


@admin_router.put("/", response_model=SiteSettings)
def update_site_settings(body: SiteSettingsUpdate, repo: SiteSettingsRepository = Depends(get_settings_repo)):
    return repo.update(body)
