from pydantic import BaseModel
from typing import Any, Dict, List

from .booking import BookingView

class ParentDashboard(BaseModel):
    profile: Dict[str, Any] = {}
    jobs: List[Dict[str, Any]] = []
    caregivers: List[Dict[str, Any]] = []
    bookings: List[BookingView] = []
    children: List[Dict[str, Any]] = []
    failed: List[str] = []
