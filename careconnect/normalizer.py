# careconnect/normalizer.py
"""
Normalización de reservas: de las respuestas de la API (con formas
distintas según versión del backend) a registros `Booking` canónicos.
"""
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging
import time
import uuid
from datetime import date, datetime

from . import schedule
from .caregivers import resolve_caregiver
from .payments import get_payment_actions
from .schemas.booking import Booking, BookingView
from .schemas.caregiver import CaregiverRef
from .statuses import get_status_color, get_status_label, is_cancelled, normalize_status
from .utils import first_present, looks_like_object_id, to_number

logger = logging.getLogger(__name__)

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"
DEFAULT_CURRENCY = "USD"
DEFAULT_PAYMENT_STATUS = "pending"

_EPOCH = datetime(1970, 1, 1)

# ---------- Extracción ----------

def _list_at(response: Any, *path: str) -> Optional[list]:
    node = response
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, list) else None

# Formas conocidas de la respuesta, en orden de preferencia
BOOKING_EXTRACTORS: Tuple[Callable[[Any], Optional[list]], ...] = (
    lambda r: _list_at(r, "bookings"),
    lambda r: _list_at(r, "data", "data", "bookings"),
    lambda r: _list_at(r, "data", "bookings"),
    lambda r: _list_at(r, "data"),
    lambda r: r if isinstance(r, list) else None,
)

def extract_bookings_from_response(response: Any) -> List[Any]:
    """Localiza la lista de reservas en la respuesta; [] si no hay ninguna."""
    for extractor in BOOKING_EXTRACTORS:
        found = extractor(response)
        if found is not None:
            return list(found)
    return []

# ---------- Orden ----------

def _sort_key(booking: Any) -> datetime:
    if not isinstance(booking, Mapping):
        return _EPOCH
    day = schedule.parse_date(booking.get("date"))
    if day is None:
        return _EPOCH
    minutes = schedule.time_string_to_minutes(first_present(booking, "startTime", "start_time")) or 0
    return datetime(day.year, day.month, day.day, minutes // 60 % 24, minutes % 60)

def sort_bookings_by_date(bookings: Iterable[Any], descending: bool = True) -> List[Any]:
    """Orden estable por (fecha, hora de inicio); por defecto la más reciente primero."""
    return sorted(bookings or [], key=_sort_key, reverse=descending)

# ---------- Campos ----------

def _clean(value: Any) -> str:
    return "" if value is None else str(value).strip()

def generate_schedule_string(
    date_value: Any,
    start_time: Any,
    end_time: Any,
    today: Optional[date] = None,
) -> str:
    """Nunca lanza: si el formateo falla se usan los valores tal cual."""
    try:
        result = schedule.build_schedule(date_value, start_time, end_time, today)
        if result:
            return result
    except Exception as e:
        logger.warning(f"Error construyendo el horario, se usan los valores crudos: {e}")

    times = " - ".join(t for t in (_clean(start_time), _clean(end_time)) if t)
    return schedule.SEPARATOR.join(p for p in (_clean(date_value), times) if p) or "Schedule TBD"

def process_children_list(children: Any) -> List[str]:
    out: List[str] = []
    if not isinstance(children, (list, tuple)):
        return out
    for child in children:
        if isinstance(child, str):
            out.append(child)
        elif isinstance(child, Mapping):
            value = first_present(child, "name", "childName", "_id", "id")
            if value is not None:
                out.append(str(value))
    return out

def _format_address(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        parts = [value.get(k) for k in ("street", "barangay", "city", "province", "zipCode")]
        return ", ".join(str(p) for p in parts if p)
    return ""

def _synthetic_id() -> str:
    return f"booking_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

def _caregiver_name_hint(data: Mapping[str, Any]) -> Optional[str]:
    name = data.get("caregiverName")
    if isinstance(name, str) and name.strip():
        return name
    caregiver = data.get("caregiver")
    if isinstance(caregiver, str) and caregiver.strip() and not looks_like_object_id(caregiver):
        return caregiver
    return None

# ---------- Normalización ----------

def _as_raw(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Booking):
        return raw.model_dump(by_alias=True, include=set(Booking.model_fields))
    if isinstance(raw, Mapping):
        return raw
    return {}

def _normalize(
    raw: Any,
    featured_caregivers: Optional[Sequence[Mapping[str, Any]]] = None,
    today: Optional[date] = None,
) -> Tuple[Booking, CaregiverRef]:
    today = today or date.today()
    data = _as_raw(raw)

    booking_id = first_present(data, "_id", "id")
    if booking_id is None:
        booking_id = _synthetic_id()
        logger.debug("Reserva sin id, usando id sintético %s", booking_id)

    ref = resolve_caregiver(data, featured_caregivers or (), fallback_name=_caregiver_name_hint(data))

    day = schedule.parse_date(data.get("date"), today) or today
    date_str = day.isoformat()
    start = schedule.to_hhmm(first_present(data, "startTime", "start_time")) or DEFAULT_START_TIME
    end = schedule.to_hhmm(first_present(data, "endTime", "end_time")) or DEFAULT_END_TIME

    booking = Booking(
        id=str(booking_id),
        caregiver=ref.name,
        caregiver_id=ref.id,
        caregiver_avatar=ref.avatar,
        status=normalize_status(data.get("status")),
        cancelled=is_cancelled(data),
        date=date_str,
        start_time=start,
        end_time=end,
        schedule=generate_schedule_string(date_str, start, end, today=today),
        children=process_children_list(data.get("children")),
        total_cost=to_number(first_present(data, "totalCost", "total_cost")),
        amount=to_number(data.get("amount")),
        payment_status=str(first_present(data, "paymentStatus", "payment_status") or DEFAULT_PAYMENT_STATUS),
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        address=_format_address(data.get("address")),
        deposit_paid=bool(first_present(data, "depositPaid", "deposit_paid")),
        final_payment_paid=bool(first_present(data, "finalPaymentPaid", "final_payment_paid")),
    )
    return booking, ref

def normalize_booking(
    raw: Any,
    featured_caregivers: Optional[Sequence[Mapping[str, Any]]] = None,
    today: Optional[date] = None,
) -> Booking:
    """
    Aplica todos los valores por defecto y derivaciones a una reserva cruda.
    Determinista salvo por el id sintético (sólo si no hay `_id`/`id`).
    Volver a normalizar el resultado no cambia nada.
    """
    return _normalize(raw, featured_caregivers, today)[0]

def process_bookings(
    bookings: Iterable[Any],
    featured_caregivers: Optional[Sequence[Mapping[str, Any]]] = None,
    today: Optional[date] = None,
) -> List[Booking]:
    """Ordena y normaliza; una salida por cada entrada, nunca se descartan."""
    return [normalize_booking(b, featured_caregivers, today) for b in sort_bookings_by_date(bookings)]

def to_booking_view(booking: Booking, caregiver_ref: CaregiverRef) -> BookingView:
    return BookingView(
        **booking.model_dump(),
        status_label=get_status_label(booking.status),
        status_color=get_status_color(booking.status),
        payment_actions=get_payment_actions(booking),
        caregiver_ref=caregiver_ref,
    )

def process_booking_views(
    bookings: Iterable[Any],
    featured_caregivers: Optional[Sequence[Mapping[str, Any]]] = None,
    today: Optional[date] = None,
) -> List[BookingView]:
    """Como process_bookings, añadiendo etiqueta, color, acciones de pago y cuidador."""
    views = []
    for raw in sort_bookings_by_date(bookings):
        booking, ref = _normalize(raw, featured_caregivers, today)
        views.append(to_booking_view(booking, ref))
    return views
