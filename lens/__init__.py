"""Lens content ranking engine."""
