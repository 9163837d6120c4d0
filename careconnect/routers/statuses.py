# careconnect/routers/statuses.py
from dataclasses import asdict
from fastapi import APIRouter

from ..schemas.status import PaymentConfigOut, StatusInfo, TaxonomyOut
from ..statuses import (
    BOOKING_STATUSES, LEGACY_ALIASES, PAYMENT_CONFIG, STATUS_TRANSITIONS,
    get_status_color, get_status_label,
)

router = APIRouter()

@router.get("", response_model=TaxonomyOut)
async def get_taxonomy():
    """Estados, etiquetas, colores y configuración de pagos para la UI."""
    statuses = [
        StatusInfo(
            value=s,
            label=get_status_label(s),
            color=get_status_color(s),
            next=sorted(STATUS_TRANSITIONS[s], key=BOOKING_STATUSES.index),
        )
        for s in BOOKING_STATUSES
    ]
    return TaxonomyOut(
        statuses=statuses,
        payment_config=PaymentConfigOut(**asdict(PAYMENT_CONFIG)),
        legacy_aliases=dict(LEGACY_ALIASES),
    )
