"""Rendering core: adjustment state, geometry, pixel filters and the engine."""
