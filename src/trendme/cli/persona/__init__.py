"""Persona creation commands."""
