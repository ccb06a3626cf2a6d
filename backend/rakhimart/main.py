"""
# `rakhimart/main.py` - Application entry point

- Creates the FastAPI app and configures CORS from `settings.allowed_origins` (list or `*`).
- Logging: one `basicConfig` at startup; DEBUG when `settings.debug`, INFO otherwise.

## Routers
**Public:** `/categories`, `/products`, `/settings`, `/cart`

**Admin (prefix `/admin`):** `/categories`, `/products`, `/settings`; each admin router
is gated by `get_current_admin`.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rakhimart.config import settings
from rakhimart.routers import carts, categories, products
from rakhimart.routers import settings as settings_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize FastAPI app
app = FastAPI(
    title="RakhiMart API",
    description="Storefront API: catalog, site settings, carts and WhatsApp checkout.",
    version="1.0.0",
)

# Configure CORS (allow front-end domain or all origins as specified)
allow_origins = [origin.strip() for origin in settings.allowed_origins.split(',')] if settings.allowed_origins else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include public routers
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(settings_router.router)
app.include_router(carts.router)

# Include admin routers (with prefix /admin)
app.include_router(categories.admin_router, prefix="/admin")
app.include_router(products.admin_router, prefix="/admin")
app.include_router(settings_router.admin_router, prefix="/admin")


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("rakhimart.main:app", host="0.0.0.0", port=8000, reload=True)
