from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from orderboard.core.config import MAX_IMAGE_BYTES
from orderboard.core.errors import NotFoundError, UnsupportedMedia, ValidationError
from orderboard.deps import get_image_storage, get_order_repository
from orderboard.schemas.order import ImageUploadResponse, OrderCreate, OrderRead, OrderUpdate
from orderboard.services.order_filters import OrderFilters
from orderboard.services.orders import OrderRepository
from orderboard.services.r2_storage import R2ImageStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _validate_upload(file: UploadFile | None) -> bytes:
    if file is None or not file.filename:
        raise ValidationError.for_field("image", "No se ha enviado ninguna imagen")

    content_type = (file.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise UnsupportedMedia("Solo se permiten archivos de imagen")

    upload_bytes = file.file.read(MAX_IMAGE_BYTES + 1)
    if len(upload_bytes) > MAX_IMAGE_BYTES:
        limit_mb = MAX_IMAGE_BYTES // (1024 * 1024)
        raise UnsupportedMedia(
            f"La imagen excede el límite de {limit_mb}MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    return upload_bytes


def _get_or_404(repo: OrderRepository, order_id: str):
    order = repo.get_by_id(order_id)
    if order is None:
        raise NotFoundError("Pedido no encontrado")
    return order


@router.get("", response_model=List[OrderRead])
def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_method: Optional[str] = Query(None, alias="paymentMethod"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    search: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    repo: OrderRepository = Depends(get_order_repository),
):
    filters = OrderFilters.from_query(
        status=status_filter,
        payment_method=payment_method,
        customer_id=customer_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return [OrderRead.model_validate(order) for order in repo.list_filtered(filters)]


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: str, repo: OrderRepository = Depends(get_order_repository)):
    return OrderRead.model_validate(_get_or_404(repo, order_id))


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, repo: OrderRepository = Depends(get_order_repository)):
    order = repo.create(payload)
    return OrderRead.model_validate(order)


@router.patch("/{order_id}", response_model=OrderRead)
def update_order(
    order_id: str,
    payload: OrderUpdate,
    repo: OrderRepository = Depends(get_order_repository),
):
    order = repo.update(order_id, payload.changes())
    return OrderRead.model_validate(order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: str, repo: OrderRepository = Depends(get_order_repository)):
    repo.delete(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{order_id}/image", response_model=ImageUploadResponse)
def upload_order_image(
    order_id: str,
    image: UploadFile | None = File(None),
    repo: OrderRepository = Depends(get_order_repository),
    storage: R2ImageStorage = Depends(get_image_storage),
):
    upload_bytes = _validate_upload(image)
    _get_or_404(repo, order_id)

    image_url = storage.upload_image(upload_bytes, filename=image.filename, content_type=image.content_type)
    try:
        order = repo.set_completion_image(order_id, image_url)
    except Exception:
        # la imagen ya está en R2 sin pedido que la referencie
        logger.warning("completion image orphaned url=%s", image_url, extra={"order_id": order_id})
        raise
    logger.info("completion image attached status=%s", order.status.value, extra={"order_id": order.id})
    return ImageUploadResponse(image_url=image_url, order=OrderRead.model_validate(order))
