"""Utility helpers for covdelta."""
