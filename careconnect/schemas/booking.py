from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from enum import Enum
from typing import Any, List, Optional

from .caregiver import CaregiverRef

class BookingStatus(str, Enum):
    pending     = "pending"
    confirmed   = "confirmed"
    in_progress = "in_progress"
    completed   = "completed"
    paid        = "paid"

class PaymentType(str, Enum):
    deposit       = "deposit"
    final_payment = "final_payment"

class _CamelModel(BaseModel):
    # Los payloads del marketplace vienen en camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Booking(_CamelModel):
    id: str
    caregiver: str = "No caregiver assigned"
    caregiver_id: Optional[str] = None
    caregiver_avatar: Optional[str] = None
    status: BookingStatus = BookingStatus.pending
    cancelled: bool = False
    date: str
    start_time: str = "09:00"
    end_time: str = "17:00"
    schedule: str
    children: List[str] = []
    total_cost: float = 0
    amount: float = 0
    payment_status: str = "pending"
    currency: str = "USD"
    address: str = ""
    deposit_paid: bool = False
    final_payment_paid: bool = False

class PaymentAction(_CamelModel):
    type: PaymentType
    label: str
    amount: float
    description: str

class BookingView(Booking):
    status_label: str
    status_color: str
    payment_actions: List[PaymentAction] = []
    caregiver_ref: CaregiverRef

class NormalizeRequest(_CamelModel):
    response: Any = None
    featured_caregivers: List[dict] = Field(default_factory=list)

class NextStatusRequest(_CamelModel):
    current_status: str
    payment_type: str

class NextStatusOut(_CamelModel):
    status: BookingStatus
    changed: bool

class PaymentRequest(_CamelModel):
    payment_type: PaymentType

class StatusPatch(BaseModel):
    status: BookingStatus
    feedback: Optional[str] = None

class CancelRequest(BaseModel):
    reason: str = Field("", max_length=500)
