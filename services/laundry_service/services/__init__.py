"""Laundry service domain operations."""
