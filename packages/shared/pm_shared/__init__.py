"""Schemas shared between the notification engine and its callers."""
