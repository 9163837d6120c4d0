# careconnect/loaders.py
"""Cargas que combinan varias llamadas a la API del marketplace."""
from typing import Any, Dict, List, Mapping, Optional, Sequence
import asyncio
import logging

from .caregivers import enrich_bookings_with_caregiver_data
from .client import MarketplaceClient
from .normalizer import extract_bookings_from_response, process_booking_views
from .schemas.booking import BookingView
from .schemas.dashboard import ParentDashboard
from .utils import to_id

logger = logging.getLogger(__name__)


def extract_caregivers_from_response(response: Any) -> List[Dict[str, Any]]:
    """Lista de cuidadores sin cuentas de padres coladas."""
    found: Any = None
    if isinstance(response, Mapping):
        data = response.get("data")
        if isinstance(data, Mapping):
            found = data.get("caregivers")
        if found is None:
            found = response.get("caregivers")
        if found is None and isinstance(data, list):
            found = data
    elif isinstance(response, list):
        found = response

    out = []
    for c in found or []:
        if not isinstance(c, Mapping):
            continue
        if c.get("role") == "parent" or c.get("userType") == "parent":
            continue
        out.append(dict(c))
    return out


async def fetch_and_process_bookings(
    client: MarketplaceClient,
    featured_caregivers: Optional[Sequence[Mapping[str, Any]]] = None,
) -> List[BookingView]:
    """Trae las reservas del usuario, las enriquece y las normaliza. [] si falla."""
    try:
        logger.info("Obteniendo reservas...")
        response = await client.get_my_bookings()
        raw = extract_bookings_from_response(response)
        logger.info(f"Extraídas {len(raw)} reservas")

        raw = await enrich_bookings_with_caregiver_data(raw, client)
        views = process_booking_views(raw, featured_caregivers)
        logger.info(f"Procesadas {len(views)} reservas")
        return views
    except Exception as e:
        logger.error(f"Error obteniendo y procesando reservas: {e}", exc_info=True)
        return []


def _list_from(response: Any, *keys: str) -> List[Dict[str, Any]]:
    if isinstance(response, list):
        items = response
    elif isinstance(response, Mapping):
        items = None
        data = response.get("data")
        for key in keys:
            if isinstance(data, Mapping) and isinstance(data.get(key), list):
                items = data[key]
                break
            if isinstance(response.get(key), list):
                items = response[key]
                break
        if items is None:
            items = data if isinstance(data, list) else []
    else:
        items = []
    return [to_id(i) for i in items if isinstance(i, Mapping)]


def _profile_from(response: Any) -> Dict[str, Any]:
    if not isinstance(response, Mapping):
        return {}
    inner = response.get("data") or response.get("user") or response
    return to_id(inner) if isinstance(inner, Mapping) else {}


async def load_parent_dashboard(client: MarketplaceClient) -> ParentDashboard:
    """
    Lanza todas las lecturas a la vez y espera a todas.
    Un fallo en una no cancela las demás: se sustituye por su valor vacío.
    """
    names = ("profile", "jobs", "caregivers", "bookings", "children")
    results = await asyncio.gather(
        client.get_profile(),
        client.get_my_jobs(),
        client.get_caregivers(),
        client.get_my_bookings(),
        client.get_my_children(),
        return_exceptions=True,
    )

    ok: Dict[str, Any] = {}
    failed: List[str] = []
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            logger.warning(f"Fallo cargando {name} del panel: {result}")
            failed.append(name)
            ok[name] = None
        else:
            ok[name] = result

    caregivers = extract_caregivers_from_response(ok["caregivers"])
    raw_bookings = extract_bookings_from_response(ok["bookings"])

    return ParentDashboard(
        profile=_profile_from(ok["profile"]),
        jobs=_list_from(ok["jobs"], "jobs"),
        caregivers=caregivers,
        bookings=process_booking_views(raw_bookings, caregivers),
        children=_list_from(ok["children"], "children"),
        failed=failed,
    )
