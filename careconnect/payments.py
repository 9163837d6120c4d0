# careconnect/payments.py
from typing import Any, List, Mapping, Union

from .schemas.booking import Booking, BookingStatus, PaymentAction, PaymentType
from .statuses import PAYMENT_CONFIG, is_cancelled, normalize_status
from .utils import first_present, to_number

def calculate_deposit(total_cost: float) -> float:
    """Depósito que confirma la reserva (20% del total)."""
    return (total_cost * PAYMENT_CONFIG.deposit_percentage) / 100

def calculate_remaining_payment(total_cost: float) -> float:
    return total_cost - calculate_deposit(total_cost)

def _as_mapping(booking: Union[Booking, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(booking, Booking):
        return booking.model_dump(by_alias=True)
    return booking or {}

def _total_cost(data: Mapping[str, Any]) -> float:
    return to_number(first_present(data, "totalCost", "total_cost"))

def get_payment_actions(booking: Union[Booking, Mapping[str, Any]]) -> List[PaymentAction]:
    """
    Acciones de pago disponibles según el estado de la reserva:
    pending -> depósito, completed -> pago final, resto -> ninguna.
    """
    data = _as_mapping(booking)
    if is_cancelled(data):
        return []

    total = _total_cost(data)
    status = normalize_status(data.get("status"))

    if status == BookingStatus.pending:
        return [PaymentAction(
            type=PaymentType.deposit,
            label="Pay Deposit",
            amount=calculate_deposit(total),
            description=f"Pay {PAYMENT_CONFIG.deposit_percentage}% deposit to confirm booking",
        )]
    if status == BookingStatus.completed:
        return [PaymentAction(
            type=PaymentType.final_payment,
            label="Complete Payment",
            amount=calculate_remaining_payment(total),
            description="Pay remaining amount after service completion",
        )]
    return []

def get_next_status_after_payment(current_status: Any, payment_type: Any) -> BookingStatus:
    """
    Planificador puro: consulta antes de llamar a la API.
    Combinaciones no válidas devuelven el estado actual sin error.
    """
    current = normalize_status(current_status)
    kind = payment_type.value if isinstance(payment_type, PaymentType) else payment_type

    if kind == PaymentType.deposit.value and current == BookingStatus.pending:
        return BookingStatus.confirmed
    if kind == PaymentType.final_payment.value and current == BookingStatus.completed:
        return BookingStatus.paid
    return current
