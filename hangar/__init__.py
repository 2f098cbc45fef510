"""Booking and slot-availability backend for vehicle detailing hangars."""

__version__ = "0.1.0"
