# careconnect/caregivers.py
"""
Resolución del cuidador de una reserva.

Orden de prioridad (gana el primero):
  1. objeto de cuidador embebido en la reserva,
  2. ids candidatos buscados en la lista de cuidadores destacados,
  3. coincidencia en la lista -> datos de la lista + respaldo del embebido,
  4. nada -> stub con el primer id y un nombre de relleno.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import asyncio
import logging

from .client import MarketplaceClient, UpstreamError
from .config import get_settings
from .schemas.caregiver import CaregiverRef
from .utils import first_present, looks_like_object_id, resolve_id_candidates, to_number, unique

logger = logging.getLogger(__name__)

NO_CAREGIVER_NAME = "No caregiver assigned"
DEFAULT_CAREGIVER_NAME = "Caregiver"

# Campos sueltos donde distintas versiones del backend guardan el id del cuidador
CAREGIVER_ID_ALIASES = (
    "assignedCaregiverId",
    "caregiverUserId",
    "caregiverProfileId",
    "providerId",
)

_EMBEDDED_KEYS = ("caregiver", "caregiverId")

# ==================== Helpers ====================

def _is_booking_shaped(obj: Mapping[str, Any]) -> bool:
    return "status" in obj and "date" in obj

def _is_caregiver_like(obj: Any) -> bool:
    return (
        isinstance(obj, Mapping)
        and bool(obj.get("name") or obj.get("_id"))
        and not _is_booking_shaped(obj)
    )

def _optional_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    number = to_number(value, default=float("nan"))
    return None if number != number else number

def _snapshot(booking: Mapping[str, Any]) -> Dict[str, Any]:
    """Datos del cuidador que la reserva ya trae (aunque estén incompletos)."""
    merged: Dict[str, Any] = {}
    for key in reversed(_EMBEDDED_KEYS):
        value = booking.get(key)
        if isinstance(value, Mapping) and not _is_booking_shaped(value):
            merged.update(value)
    if booking.get("caregiverAvatar") and not merged.get("avatar"):
        merged["avatar"] = booking["caregiverAvatar"]
    return merged

def _to_ref(
    source: Mapping[str, Any],
    fallback: Optional[Mapping[str, Any]] = None,
    fallback_name: Optional[str] = None,
    default_id: Optional[str] = None,
) -> CaregiverRef:
    fallback = fallback or {}
    ids = resolve_id_candidates(source)
    review_count = _optional_number(first_present(source, "reviewCount", "reviewsCount", "totalReviews"))
    if review_count is None:
        review_count = _optional_number(first_present(fallback, "reviewCount", "reviewsCount", "totalReviews"))
    rating = _optional_number(source.get("rating"))
    hourly_rate = _optional_number(first_present(source, "hourlyRate", "rate"))

    return CaregiverRef(
        id=ids[0] if ids else default_id,
        name=source.get("name") or fallback.get("name") or fallback_name or DEFAULT_CAREGIVER_NAME,
        avatar=first_present(source, "avatar", "profileImage", "photo")
        or first_present(fallback, "avatar", "profileImage", "photo"),
        rating=rating if rating is not None else _optional_number(fallback.get("rating")),
        review_count=int(review_count) if review_count is not None else None,
        hourly_rate=hourly_rate if hourly_rate is not None
        else _optional_number(first_present(fallback, "hourlyRate", "rate")),
    )

# ==================== Resolución (pura) ====================

def embedded_caregiver(booking: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    for key in _EMBEDDED_KEYS:
        value = booking.get(key)
        if _is_caregiver_like(value):
            return value
    return None

def caregiver_id_candidates(booking: Mapping[str, Any]) -> List[str]:
    ids: List[str] = []
    ids.extend(resolve_id_candidates(booking.get("caregiverId")))

    caregiver = booking.get("caregiver")
    if isinstance(caregiver, Mapping):
        if not _is_booking_shaped(caregiver):
            ids.extend(resolve_id_candidates(caregiver))
    elif looks_like_object_id(caregiver):
        ids.append(caregiver)

    for alias in CAREGIVER_ID_ALIASES:
        ids.extend(resolve_id_candidates(booking.get(alias)))
    return unique(ids)

def find_featured_caregiver(
    candidate_ids: Sequence[str],
    featured: Iterable[Mapping[str, Any]],
) -> Optional[Mapping[str, Any]]:
    """Primera entrada de la lista que comparte algún id con los candidatos."""
    entries = [(entry, set(resolve_id_candidates(entry))) for entry in featured or () if isinstance(entry, Mapping)]
    for candidate in candidate_ids:
        for entry, ids in entries:
            if candidate in ids:
                return entry
    return None

def resolve_caregiver(
    booking: Mapping[str, Any],
    featured: Iterable[Mapping[str, Any]] = (),
    fallback_name: Optional[str] = None,
) -> CaregiverRef:
    """Nunca falla: en el peor caso devuelve un nombre de relleno."""
    booking = booking or {}

    candidates = caregiver_id_candidates(booking)
    embedded = embedded_caregiver(booking)
    if embedded is not None:
        return _to_ref(
            embedded,
            fallback=_snapshot(booking),
            fallback_name=fallback_name,
            default_id=candidates[0] if candidates else None,
        )

    featured = list(featured or ())
    match = find_featured_caregiver(candidates, featured)
    if match is not None:
        return _to_ref(match, fallback=_snapshot(booking), fallback_name=fallback_name, default_id=candidates[0])

    if candidates and logger.isEnabledFor(logging.DEBUG):
        available = [resolve_id_candidates(c) for c in featured if isinstance(c, Mapping)]
        logger.debug("Cuidador no resuelto: candidatos=%s disponibles=%s", candidates, available)

    avatar = _snapshot(booking).get("avatar")
    if not candidates:
        return CaregiverRef(id=None, name=fallback_name or NO_CAREGIVER_NAME, avatar=avatar)
    return CaregiverRef(id=candidates[0], name=fallback_name or DEFAULT_CAREGIVER_NAME, avatar=avatar)

# ==================== Enriquecimiento (red) ====================

def _plain_id(caregiver_id: Any) -> Optional[str]:
    if isinstance(caregiver_id, Mapping):
        caregiver_id = caregiver_id.get("_id") or caregiver_id.get("id")
    if caregiver_id is None or caregiver_id == "":
        return None
    return str(caregiver_id)

async def fetch_caregiver_data(client: MarketplaceClient, caregiver_id: Any) -> Optional[Dict[str, Any]]:
    """Perfil actual del cuidador, o None si no se puede obtener."""
    cid = _plain_id(caregiver_id)
    if not cid:
        return None
    try:
        payload = await client.get_caregiver(cid)
    except UpstreamError as exc:
        logger.warning("No se pudo obtener el cuidador %s: %s", cid, exc)
        return None

    if not isinstance(payload, Mapping):
        return None
    data = payload.get("data") or payload.get("caregiver") or payload
    return dict(data) if isinstance(data, Mapping) else None

async def enrich_bookings_with_caregiver_data(
    bookings: Sequence[Any],
    client: MarketplaceClient,
    max_concurrency: Optional[int] = None,
) -> List[Any]:
    """
    Mezcla el perfil actual del cuidador en cada reserva.
    Las peticiones van en paralelo con un máximo de `max_concurrency`.
    Si algo falla se devuelve la reserva original.
    """
    limit = max_concurrency or get_settings().enrichment_concurrency
    semaphore = asyncio.Semaphore(max(1, limit))

    async def enrich_one(booking: Any) -> Any:
        if not isinstance(booking, Mapping):
            return booking
        try:
            original = dict(booking)
            caregiver_id = booking.get("caregiverId")
            if not caregiver_id:
                return original
            async with semaphore:
                fresh = await fetch_caregiver_data(client, caregiver_id)
            if not fresh:
                return original
            embedded = booking.get("caregiver")
            return {
                **original,
                "caregiver": {
                    **(embedded if isinstance(embedded, Mapping) else {}),
                    **fresh,
                    "_id": _plain_id(caregiver_id),
                },
            }
        except Exception as e:
            logger.error(f"Error enriqueciendo la reserva {booking.get('_id')}: {e}", exc_info=True)
            return booking

    return list(await asyncio.gather(*(enrich_one(b) for b in bookings)))
