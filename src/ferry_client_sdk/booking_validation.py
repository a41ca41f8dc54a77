from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from .exceptions import ValidationError, ValidationIssue
from .inventory_validation import as_number, is_blank

BOOKING_TYPES = ("passenger", "vehicle", "cargo")
MAX_SUPPLY_AMOUNT = 100_000

_EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def validate_registration(
    full_name: str | None,
    email: str | None,
    phone: str | None,
    password: str | None,
    confirm_password: str | None,
) -> dict[str, Any]:
    """Check a passenger sign-up form; the first failing rule is reported."""
    if any(is_blank(value) for value in (full_name, email, phone, password, confirm_password)):
        raise ValidationError.single("form", "Please fill in all required fields.")
    email = email.strip()
    phone = phone.strip()
    if not _EMAIL_PATTERN.search(email):
        raise ValidationError.single("email", "Please enter a valid email address.")
    if len(password) < 6:
        raise ValidationError.single("password", "Password must be at least 6 characters long.")
    if password != confirm_password:
        raise ValidationError.single("confirm_password", "Passwords do not match.")
    if not 10 <= len(phone) <= 20:
        raise ValidationError.single("phone", "Phone number must be between 10 and 20 digits.")
    return {"full_name": full_name.strip(), "email": email, "phone": phone, "password": password}


def _has_letters_and_digits(value: str) -> bool:
    return bool(re.search(r"[A-Za-z]", value)) and bool(re.search(r"[0-9]", value))


def validate_booking(
    booking_type: str,
    travel_at: datetime,
    route: str | None,
    amount_paid: Any,
    *,
    num_passengers: Any = 1,
    vehicle_type: str | None = None,
    vehicle_plate: str | None = None,
    cargo_description: str | None = None,
    cargo_weight_kg: Any = None,
    payment_method: str | None = None,
    transaction_id: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    kind = (booking_type or "").strip().lower()
    if kind not in BOOKING_TYPES:
        raise ValidationError.single("booking_type", f"Booking type must be one of: {', '.join(BOOKING_TYPES)}.")
    current = now or datetime.now(travel_at.tzinfo)
    if travel_at < current:
        raise ValidationError.single(
            "travel_at", "You cannot book for a past date or time. Please select a future date and time."
        )
    if is_blank(route):
        raise ValidationError.single("route", "Please select a route.")
    amount = as_number(amount_paid)
    if amount is None or amount < 0:
        raise ValidationError.single("amount_paid", "Amount paid must be a non-negative number.")

    payload: dict[str, Any] = {
        "booking_type": kind,
        "travel_date": travel_at.strftime("%Y-%m-%d"),
        "travel_time": travel_at.strftime("%H:%M"),
        "route": route.strip(),
        "amount_paid": amount,
        "payment_status": "paid" if kind == "passenger" else "pending",
    }
    if kind == "passenger":
        passengers = as_number(num_passengers)
        payload["num_passengers"] = int(passengers) if passengers and passengers >= 1 else 1
        payload["payment_method"] = "cash"
        payload["transaction_id"] = f"PASS-{int(current.timestamp() * 1000)}"
        return payload

    issues: list[ValidationIssue] = []
    if not is_blank(transaction_id) and not _has_letters_and_digits(transaction_id):
        issues.append(ValidationIssue("transaction_id", "Transaction ID must contain both letters and numbers."))
    if is_blank(payment_method):
        issues.append(ValidationIssue("payment_method", "Please select a payment method."))
    if issues:
        raise ValidationError(issues)
    payload["payment_method"] = payment_method.strip()
    payload["transaction_id"] = (transaction_id or "").strip()
    if kind == "vehicle":
        payload["vehicle_type"] = (vehicle_type or "").strip()
        payload["vehicle_plate"] = (vehicle_plate or "").strip()
    else:
        payload["cargo_description"] = (cargo_description or "").strip()
        payload["cargo_weight_kg"] = as_number(cargo_weight_kg)
    return payload


def validate_rating(rating: Any) -> int:
    value = as_number(rating)
    if value is None or value != int(value) or not 1 <= value <= 5:
        raise ValidationError.single("rating", "Rating must be a whole number from 1 to 5.")
    return int(value)


def validate_supply_amount(amount: Any) -> float:
    value = as_number(amount)
    if value is None or value <= 0:
        raise ValidationError.single("amount", "Enter a positive number")
    if value >= MAX_SUPPLY_AMOUNT:
        raise ValidationError.single("amount", "Amount must be less than 100,000 KES")
    return value
