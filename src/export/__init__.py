"""Tenancy export driver: discovery, rendering, and state generation."""
