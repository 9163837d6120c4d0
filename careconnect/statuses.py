# careconnect/statuses.py
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from .schemas.booking import BookingStatus

# ==================== Taxonomía de estados ====================

BOOKING_STATUSES: tuple[BookingStatus, ...] = tuple(BookingStatus)

STATUS_LABELS: Mapping[BookingStatus, str] = MappingProxyType({
    BookingStatus.pending: "Pending",
    BookingStatus.confirmed: "Confirmed",
    BookingStatus.in_progress: "In Progress",
    BookingStatus.completed: "Completed",
    BookingStatus.paid: "Paid",
})

STATUS_COLORS: Mapping[BookingStatus, str] = MappingProxyType({
    BookingStatus.pending: "#F59E0B",
    BookingStatus.confirmed: "#3B82F6",
    BookingStatus.in_progress: "#10B981",
    BookingStatus.completed: "#8B5CF6",
    BookingStatus.paid: "#059669",
})

NEUTRAL_COLOR = "#6B7280"

# Alias heredados que el backend todavía devuelve
LEGACY_ALIASES: Mapping[str, BookingStatus] = MappingProxyType({
    "pending_confirmation": BookingStatus.pending,
})

CANCELLED_VALUES = frozenset({"cancelled", "canceled"})


@dataclass(frozen=True)
class PaymentConfig:
    deposit_percentage: int = 20
    escrow_enabled: bool = True
    payment_on_completion: bool = True


PAYMENT_CONFIG = PaymentConfig()

# Aristas del ciclo de vida. Los pagos gobiernan pending→confirmed y
# completed→paid; in_progress y completed los marcan cuidador/padre.
STATUS_TRANSITIONS: Mapping[BookingStatus, frozenset[BookingStatus]] = MappingProxyType({
    BookingStatus.pending: frozenset({BookingStatus.confirmed}),
    BookingStatus.confirmed: frozenset({BookingStatus.in_progress}),
    BookingStatus.in_progress: frozenset({BookingStatus.completed}),
    BookingStatus.completed: frozenset({BookingStatus.paid}),
    BookingStatus.paid: frozenset(),
})

# Aristas que sólo puede disparar un pago
PAYMENT_TRANSITIONS = frozenset({
    (BookingStatus.pending, BookingStatus.confirmed),
    (BookingStatus.completed, BookingStatus.paid),
})

CANCELLABLE_STATUSES = frozenset({BookingStatus.pending, BookingStatus.confirmed})


def _status_key(value: Any) -> str:
    if isinstance(value, BookingStatus):
        return value.value
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def normalize_status(value: Any) -> BookingStatus:
    """
    Devuelve siempre uno de los cinco estados canónicos.
    Cualquier valor desconocido (o vacío) se convierte en `pending`.
    """
    key = _status_key(value)
    if key in LEGACY_ALIASES:
        return LEGACY_ALIASES[key]
    try:
        return BookingStatus(key)
    except ValueError:
        return BookingStatus.pending


def get_status_label(status: Any) -> str:
    try:
        return STATUS_LABELS.get(BookingStatus(_status_key(status)), "")
    except ValueError:
        return ""


def get_status_color(status: Any) -> str:
    try:
        return STATUS_COLORS.get(BookingStatus(_status_key(status)), NEUTRAL_COLOR)
    except ValueError:
        return NEUTRAL_COLOR


def can_transition(old: Any, new: Any) -> bool:
    return normalize_status(new) in STATUS_TRANSITIONS.get(normalize_status(old), frozenset())


def is_cancelled(raw: Mapping[str, Any]) -> bool:
    """Una reserva cancelada mantiene su estado canónico pero se marca aparte."""
    if raw.get("cancelled") is True:
        return True
    return _status_key(raw.get("status")) in CANCELLED_VALUES
