"""Utility helpers shared by the crop session and its adapters."""
