"""
Tests para la taxonomía de estados
"""
import pytest

from careconnect.schemas.booking import BookingStatus
from careconnect.statuses import (
    BOOKING_STATUSES, NEUTRAL_COLOR, PAYMENT_CONFIG, STATUS_LABELS,
    can_transition, get_status_color, get_status_label, is_cancelled, normalize_status,
)

@pytest.mark.parametrize("raw, expected", [
    ("pending", BookingStatus.pending),
    ("confirmed", BookingStatus.confirmed),
    ("in_progress", BookingStatus.in_progress),
    ("completed", BookingStatus.completed),
    ("paid", BookingStatus.paid),
    ("pending_confirmation", BookingStatus.pending),
    (" Confirmed ", BookingStatus.confirmed),
    (BookingStatus.paid, BookingStatus.paid),
])
def test_normalize_known_statuses(raw, expected):
    assert normalize_status(raw) == expected

@pytest.mark.parametrize("raw", ["garbage", "", None, 42, "cancelled", "pending_payment", ["paid"]])
def test_unknown_statuses_fall_back_to_pending(raw):
    """Cualquier valor fuera de la taxonomía se convierte en pending"""
    assert normalize_status(raw) == BookingStatus.pending
    assert normalize_status(raw) in BOOKING_STATUSES

def test_labels_and_colors():
    assert get_status_label("in_progress") == "In Progress"
    assert get_status_color(BookingStatus.paid) == "#059669"
    assert len(STATUS_LABELS) == 5

def test_unknown_lookup_keys_do_not_raise():
    assert get_status_label("nope") == ""
    assert get_status_label(None) == ""
    assert get_status_color("nope") == NEUTRAL_COLOR

def test_payment_config_is_fixed():
    assert PAYMENT_CONFIG.deposit_percentage == 20
    assert PAYMENT_CONFIG.escrow_enabled is True
    assert PAYMENT_CONFIG.payment_on_completion is True
    with pytest.raises(Exception):
        PAYMENT_CONFIG.deposit_percentage = 50

def test_transitions_follow_lifecycle():
    assert can_transition("pending", "confirmed")
    assert can_transition("confirmed", "in_progress")
    assert can_transition("in_progress", "completed")
    assert can_transition("completed", "paid")
    assert not can_transition("pending", "completed")
    assert not can_transition("paid", "pending")

def test_is_cancelled():
    assert is_cancelled({"status": "cancelled"})
    assert is_cancelled({"status": "Canceled"})
    assert is_cancelled({"status": "confirmed", "cancelled": True})
    assert not is_cancelled({"status": "pending"})
    assert not is_cancelled({})
