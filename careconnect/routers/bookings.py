# careconnect/routers/bookings.py
from fastapi import APIRouter, Depends, HTTPException, Path, Request
from typing import Any, Dict, List, NoReturn

from ..client import MarketplaceClient, UpstreamError, UpstreamNotFoundError
from ..loaders import extract_caregivers_from_response, fetch_and_process_bookings
from ..middleware.rate_limit import limiter, MUTATION_LIMIT, NORMALIZE_LIMIT, READ_LIMIT
from ..normalizer import extract_bookings_from_response, normalize_booking, process_booking_views
from ..payments import get_next_status_after_payment
from ..schemas.booking import (
    BookingView, CancelRequest, NextStatusOut, NextStatusRequest, NormalizeRequest,
    PaymentRequest, StatusPatch,
)
from ..security import get_marketplace_client
from ..statuses import CANCELLABLE_STATUSES, PAYMENT_TRANSITIONS, can_transition, normalize_status
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

BOOKING_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"

# ---------- Utilidades ----------

def _upstream_failed(e: UpstreamError) -> NoReturn:
    if isinstance(e, UpstreamNotFoundError):
        raise HTTPException(404, "Reserva no encontrada")
    logger.error(f"Error del marketplace: {e}")
    raise HTTPException(502, "Error al comunicar con el marketplace")

async def _get_raw_booking(client: MarketplaceClient, booking_id: str) -> Dict[str, Any]:
    try:
        return await client.get_booking(booking_id)
    except UpstreamError as e:
        _upstream_failed(e)

def _to_view(raw: Dict[str, Any]) -> BookingView:
    return process_booking_views([raw])[0]

# ---------- Motor puro ----------

@router.post("/normalize", response_model=List[BookingView])
@limiter.limit(NORMALIZE_LIMIT)
async def normalize_bookings(request: Request, payload: NormalizeRequest):
    """Normaliza una respuesta de reservas con cualquiera de sus formas conocidas."""
    raw = extract_bookings_from_response(payload.response)
    return process_booking_views(raw, payload.featured_caregivers)

@router.post("/next-status", response_model=NextStatusOut)
async def plan_next_status(payload: NextStatusRequest):
    current = normalize_status(payload.current_status)
    new = get_next_status_after_payment(current, payload.payment_type)
    return NextStatusOut(status=new, changed=new != current)

# ---------- Reservas del usuario ----------

@router.get("/mine", response_model=List[BookingView])
@router.get("/my", response_model=List[BookingView])  # alias opcional
@limiter.limit(READ_LIMIT)
async def list_my_bookings(
    request: Request,
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    try:
        featured = extract_caregivers_from_response(await client.get_caregivers())
    except UpstreamError as e:
        logger.warning(f"Sin lista de cuidadores para enriquecer: {e}")
        featured = []
    return await fetch_and_process_bookings(client, featured)

@router.get("/{booking_id}", response_model=BookingView)
async def get_booking(
    booking_id: str = Path(..., pattern=BOOKING_ID_PATTERN),
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    return _to_view(await _get_raw_booking(client, booking_id))

@router.post("/{booking_id}/payments", response_model=BookingView)
@limiter.limit(MUTATION_LIMIT)
async def pay_booking(
    request: Request,
    body: PaymentRequest,
    booking_id: str = Path(..., pattern=BOOKING_ID_PATTERN),
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    raw = await _get_raw_booking(client, booking_id)
    booking = normalize_booking(raw)
    if booking.cancelled:
        raise HTTPException(400, "La reserva está cancelada")

    new = get_next_status_after_payment(booking.status, body.payment_type)
    if new == booking.status:
        raise HTTPException(
            status_code=400,
            detail=f"Pago no permitido: {body.payment_type.value} con estado {booking.status.value}",
        )

    try:
        await client.update_booking_status(booking_id, new.value)
    except UpstreamError as e:
        _upstream_failed(e)
    logger.info(f"Reserva {booking_id}: {booking.status.value} → {new.value} tras {body.payment_type.value}")
    return _to_view(await _get_raw_booking(client, booking_id))

@router.patch("/{booking_id}/status", response_model=BookingView)
@limiter.limit(MUTATION_LIMIT)
async def patch_status(
    request: Request,
    body: StatusPatch,
    booking_id: str = Path(..., pattern=BOOKING_ID_PATTERN),
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    raw = await _get_raw_booking(client, booking_id)
    booking = normalize_booking(raw)
    old, new = booking.status, body.status

    if new == old:
        return _to_view(raw)
    if booking.cancelled:
        raise HTTPException(400, "La reserva está cancelada")
    if (old, new) in PAYMENT_TRANSITIONS:
        raise HTTPException(400, f"{old.value} → {new.value} requiere un pago")
    if not can_transition(old, new):
        raise HTTPException(
            status_code=400,
            detail=f"Transición no permitida: {old.value} → {new.value}",
        )

    try:
        await client.update_booking_status(booking_id, new.value, body.feedback)
    except UpstreamError as e:
        _upstream_failed(e)
    return _to_view(await _get_raw_booking(client, booking_id))

@router.post("/{booking_id}/cancel", response_model=BookingView)
@limiter.limit(MUTATION_LIMIT)
async def cancel_booking(
    request: Request,
    body: CancelRequest | None = None,
    booking_id: str = Path(..., pattern=BOOKING_ID_PATTERN),
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    raw = await _get_raw_booking(client, booking_id)
    booking = normalize_booking(raw)
    if booking.cancelled:
        return _to_view(raw)
    if booking.status not in CANCELLABLE_STATUSES:
        raise HTTPException(400, f"No se puede cancelar una reserva en estado {booking.status.value}")

    try:
        await client.cancel_booking(booking_id, body.reason if body else "")
    except UpstreamError as e:
        _upstream_failed(e)
    # El estado canónico se conserva; la cancelación va aparte
    return _to_view({**raw, "cancelled": True})
