# hangar/utils/identity_utils.py
"""
Normalization of the natural keys used for identity resolution.

Phone: digits only (dedupe key for customers within a business).
Plate: upper-case alphanumerics, at most 7 chars (dedupe key for vehicles).
"""

import re

PLATE_MAX_LEN = 7


def normalize_phone(phone: str) -> str:
    """Strip everything but digits: "(11) 98765-4321" → "11987654321"."""
    return re.sub(r"\D", "", phone or "")


def is_valid_phone(phone: str) -> bool:
    """DDD + number: 10 or 11 digits after normalization."""
    return 10 <= len(normalize_phone(phone)) <= 11


def normalize_plate(plate: str) -> str:
    """"abc-1d23" → "ABC1D23"."""
    return re.sub(r"[^A-Z0-9]", "", (plate or "").upper())[:PLATE_MAX_LEN]
