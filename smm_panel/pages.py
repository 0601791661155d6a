from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from smm_panel.core.config import get_settings
from smm_panel.middlewares.rate_limit import limiter

settings = get_settings()
router = APIRouter(include_in_schema=False)

PAGES = {
    "/": "index.html",
    "/login": "login.html",
    "/register": "register.html",
    "/dashboard": "dashboard.html",
    "/orders": "orders.html",
    "/services": "services.html",
    "/balance": "balance.html",
    "/tickets": "tickets.html",
    "/profile": "profile.html",
    "/seller/orders": "seller-orders.html",
    "/seller/services": "seller-services.html",
    "/admin": "admin-dashboard.html",
    "/admin/users": "admin-users.html",
    "/admin/settings": "admin-settings.html",
    "/admin/logs": "admin-logs.html",
}


def static_root() -> Path:
    return Path(settings.static_dir)


def page_file(name: str) -> Path | None:
    path = static_root() / name
    return path if path.is_file() else None


def _make_page_route(filename: str):
    def _page(request: Request):
        path = page_file(filename)
        if path is None:
            raise HTTPException(status_code=404, detail="Page not found")
        return FileResponse(path, media_type="text/html")

    _page.__name__ = f"page_{filename.replace('.html', '').replace('-', '_')}"
    return limiter.exempt(_page)


for _path, _filename in PAGES.items():
    router.add_api_route(_path, _make_page_route(_filename), methods=["GET"])
