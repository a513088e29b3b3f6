"""
Admin Discount Management Endpoints
"""
import logging
from typing import Optional
from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from catalog_admin.api.deps import get_bulk_job_store, get_caller_id, get_discount_service
from catalog_admin.config import settings
from catalog_admin.schemas.common import ResponseModel, paginate
from catalog_admin.schemas.discount import (
    BulkDiscountRequest,
    DiscountedProductResponse,
    DiscountPreviewRequest,
    ProductDiscountApply,
)
from catalog_admin.services.bulk_discount import BulkDiscountOrchestrator, validate_bulk_discount
from catalog_admin.services.bulk_jobs import BulkJobStore, run_bulk_job
from catalog_admin.services.discount_client import DiscountServiceClient
from catalog_admin.services.discount_editor import DiscountFieldController
from catalog_admin.services.errors import (
    BatchInProgressError,
    BulkJobNotFoundError,
    DiscountError,
    DiscountValidationError,
    RemoteAuthenticationError,
    RemoteServiceError,
)
from catalog_admin.utils.discount import (
    format_discount_percentage,
    format_price_display,
    rounded_discount_percent,
    savings_amount,
    to_decimal,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(error: DiscountError) -> HTTPException:
    if isinstance(error, DiscountValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if isinstance(error, RemoteAuthenticationError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(error, BulkJobNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, BatchInProgressError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
    if isinstance(error, RemoteServiceError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)


def _product_row(product: dict) -> DiscountedProductResponse:
    category = product.get("category")
    if isinstance(category, dict):
        category = category.get("name")

    price = to_decimal(product.get("price"))
    discount_price = to_decimal(product.get("discountPrice"))

    return DiscountedProductResponse(
        id=str(product.get("_id") or product.get("id") or ""),
        name=product.get("name"),
        category=category or "Uncategorized",
        price=price,
        discountPrice=discount_price,
        discountPercentage=rounded_discount_percent(price, discount_price),
        savings=savings_amount(price, discount_price),
        priceDisplay=format_price_display(price),
        discountPriceDisplay=format_price_display(discount_price),
    )


@router.post("/discounts/preview", response_model=ResponseModel)
async def preview_discount(
    payload: DiscountPreviewRequest,
    _caller: str = Depends(get_caller_id),
):
    """Recalculate the editor fields after the admin edits one of them"""
    editor = DiscountFieldController("preview", payload.originalPrice, payload.discountPrice)
    state = editor.edit(payload.editedField, payload.value, blur=payload.blur)

    return ResponseModel(
        success=True,
        data={
            **state.to_dict(),
            "liveSellingPrice": str(editor.live_selling_price),
            "hasExistingDiscount": editor.has_existing_discount,
        },
        message="Discount preview calculated"
    )


@router.post("/products/{product_id}/discount", response_model=ResponseModel)
def apply_product_discount(
    product_id: str,
    payload: ProductDiscountApply,
    service: DiscountServiceClient = Depends(get_discount_service),
):
    """Apply a discount to a single product"""
    editor = DiscountFieldController(product_id, payload.originalPrice, payload.discountPrice)
    if payload.sellingPrice is not None:
        editor.on_selling_price_edited(payload.sellingPrice)
    else:
        editor.on_discount_percent_edited(payload.discountPercentage)

    try:
        result = editor.apply(service)
    except DiscountError as e:
        raise _http_error(e)

    return ResponseModel(
        success=True,
        data={"productId": product_id, "editor": editor.state.to_dict(), "result": result},
        message=f"Discount of {format_discount_percentage(editor.state.discount_percent)}% applied successfully."
    )


@router.delete("/products/{product_id}/discount", response_model=ResponseModel)
def remove_product_discount(
    product_id: str,
    originalPrice: Optional[Decimal] = Query(None, ge=0),
    discountPrice: Optional[Decimal] = Query(None),
    service: DiscountServiceClient = Depends(get_discount_service),
):
    """
    Remove a product's discount.

    With the product's prices the editor rules apply (nothing to remove is a
    no-op); without them, as on the discounted products page, the removal is
    sent straight to the backend.
    """
    try:
        if originalPrice is None:
            result = service.remove_discount(product_id)
        else:
            result = DiscountFieldController(product_id, originalPrice, discountPrice).remove(service)
    except DiscountError as e:
        raise _http_error(e)

    if result is None:
        return ResponseModel(success=True, data={"productId": product_id, "removed": False}, message="No discount to remove")

    return ResponseModel(
        success=True,
        data={"productId": product_id, "removed": True, "result": result},
        message="Discount removed successfully."
    )


@router.get("/discounts", response_model=ResponseModel)
def list_discounted_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Filter by product name"),
    service: DiscountServiceClient = Depends(get_discount_service),
):
    """List products that currently carry a discount"""
    try:
        products = service.list_discounted_products()
    except RemoteAuthenticationError as e:
        raise _http_error(e)
    except RemoteServiceError as e:
        logger.error(f"Failed to fetch discounted products: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch discounted products")

    rows = [_product_row(product) for product in products]
    if search:
        term = search.strip().lower()
        rows = [row for row in rows if row.name and term in row.name.lower()]

    items, pagination = paginate(rows, page, limit)
    return ResponseModel(
        success=True,
        data={"items": items, "pagination": pagination},
        message="Discounted products retrieved successfully"
    )


@router.post("/discounts/bulk", response_model=ResponseModel, status_code=status.HTTP_202_ACCEPTED)
async def start_bulk_discount(
    payload: BulkDiscountRequest,
    background_tasks: BackgroundTasks,
    caller_id: str = Depends(get_caller_id),
    service: DiscountServiceClient = Depends(get_discount_service),
    store: BulkJobStore = Depends(get_bulk_job_store),
):
    """
    Apply or remove a discount for the selected products.

    The batch runs in the background; poll the returned job for progress.
    """
    requested = payload.discountPercentage
    if requested is None:
        requested = str(settings.DEFAULT_BULK_DISCOUNT)

    product_ids = list(payload.productIds)
    try:
        discount = validate_bulk_discount(payload.mode, requested)
        job = store.create(caller_id, payload.mode, len(product_ids), discount)
    except DiscountError as e:
        raise _http_error(e)

    orchestrator = BulkDiscountOrchestrator(service, close_delay=settings.BULK_SUCCESS_CLOSE_DELAY)

    if not product_ids:
        result = run_bulk_job(store, job.id, orchestrator, product_ids, payload.mode, discount)
        return ResponseModel(success=True, data=store.get(job.id).to_dict(), message=result.summary)

    background_tasks.add_task(run_bulk_job, store, job.id, orchestrator, product_ids, payload.mode, discount)
    logger.info(f"Bulk discount job {job.id} queued for {len(product_ids)} products")

    return ResponseModel(success=True, data=job.to_dict(), message="Bulk discount started")


@router.get("/discounts/bulk/{job_id}", response_model=ResponseModel)
async def get_bulk_discount_job(
    job_id: str,
    caller_id: str = Depends(get_caller_id),
    store: BulkJobStore = Depends(get_bulk_job_store),
):
    """Latest progress of a bulk discount job"""
    try:
        job = store.get(job_id, owner=caller_id)
    except DiscountError as e:
        raise _http_error(e)

    return ResponseModel(
        success=True,
        data=job.to_dict(),
        message=job.result.summary if job.result else "Bulk discount in progress"
    )


@router.delete("/discounts/bulk/{job_id}", response_model=ResponseModel)
async def dismiss_bulk_discount_job(
    job_id: str,
    caller_id: str = Depends(get_caller_id),
    store: BulkJobStore = Depends(get_bulk_job_store),
):
    """Dismiss a finished bulk discount job"""
    try:
        store.discard(job_id, owner=caller_id)
    except DiscountError as e:
        raise _http_error(e)

    return ResponseModel(success=True, data={"jobId": job_id}, message="Bulk discount dismissed")
