"""Orbit mood tracker backend."""
