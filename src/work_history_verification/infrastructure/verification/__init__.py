"""Verification record persistence."""
