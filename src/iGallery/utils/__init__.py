"""Utility helpers shared across iGallery."""
