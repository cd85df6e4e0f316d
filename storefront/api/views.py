"""Server-rendered HTML views"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from typing import Optional
import logging

from storefront.core.config import settings
from storefront.core.exceptions import NotFoundException, StorefrontException
from storefront.core.middleware import status_code_for
from storefront.services.cart_service import CartService
from storefront.services.product_service import ProductService
from storefront.utils.dependencies import get_cart_service, get_product_service
from storefront.utils.pagination import DEFAULT_LIMIT

router = APIRouter(include_in_schema=False)
logger = logging.getLogger(__name__)

template_dir = Path(__file__).parent.parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html", "xml"]),
)

def render(template_name: str, status_code: int = status.HTTP_200_OK, **context) -> HTMLResponse:
    """Render a template into an HTML response"""
    context.setdefault("app_name", settings.APP_NAME)
    html = env.get_template(template_name).render(**context)
    return HTMLResponse(html, status_code=status_code)

def render_error(title: str, exc: StorefrontException) -> HTMLResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error(f"View failed: {exc.detail}")
    return render("error.html", status_code=code, title=title, message=exc.detail, errors=getattr(exc, "errors", []))

@router.get("/")
async def home():
    return RedirectResponse(url="/products", status_code=status.HTTP_302_FOUND)

@router.get("/products", response_class=HTMLResponse)
async def products_view(
    limit: int = Query(DEFAULT_LIMIT),
    page: int = Query(1),
    sort: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    """Paginated product listing with filter and sort controls"""
    try:
        result = await service.list(limit=limit, page=page, sort=sort, query=query)
    except StorefrontException as e:
        return render_error("Products", e)

    # Page links point back at this view rather than the JSON API
    for key in ("prev_link", "next_link"):
        if result[key]:
            result[key] = result[key].replace("/api/products", "/products", 1)

    return render(
        "products.html",
        title="Products",
        products=result["payload"],
        pagination=result,
        current_query=query or "",
        current_sort=sort or "",
        current_limit=limit,
    )

@router.get("/products/{pid}", response_class=HTMLResponse)
async def product_detail_view(
    pid: str,
    service: ProductService = Depends(get_product_service),
):
    """Single product page"""
    try:
        if not service.products.is_valid_id(pid):
            raise NotFoundException("Product not found")
        product = await service.get_by_id(pid)
    except StorefrontException as e:
        return render_error("Product not found", e)

    return render("product_detail.html", title=product["title"], product=product)

@router.get("/carts/{cid}", response_class=HTMLResponse)
async def cart_view(
    cid: str,
    service: CartService = Depends(get_cart_service),
):
    """Cart contents with line subtotals"""
    try:
        if not service.carts.is_valid_id(cid):
            raise NotFoundException("Cart not found")
        cart = await service.get_by_id(cid)
    except StorefrontException as e:
        return render_error("Cart not found", e)

    total = 0.0
    for line in cart["products"]:
        line["subtotal"] = line["product"]["price"] * line["quantity"] if line["product"] else None
        total += line["subtotal"] or 0.0

    return render("cart.html", title="Shopping cart", cart=cart, total=total)

@router.get("/realtimeproducts", response_class=HTMLResponse)
async def realtime_products_view(service: ProductService = Depends(get_product_service)):
    """Live product list kept current over the products WebSocket"""
    try:
        result = await service.list(limit=settings.REALTIME_VIEW_LIMIT, page=1)
    except StorefrontException as e:
        return render_error("Real-time products", e)

    return render(
        "real_time_products.html",
        title="Real-time products",
        products=result["payload"],
        realtime=True,
    )
