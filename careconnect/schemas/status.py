from pydantic import BaseModel
from typing import Dict, List

from .booking import BookingStatus

class StatusInfo(BaseModel):
    value: BookingStatus
    label: str
    color: str
    next: List[BookingStatus] = []

class PaymentConfigOut(BaseModel):
    deposit_percentage: int
    escrow_enabled: bool
    payment_on_completion: bool

class TaxonomyOut(BaseModel):
    statuses: List[StatusInfo]
    payment_config: PaymentConfigOut
    legacy_aliases: Dict[str, BookingStatus] = {}
