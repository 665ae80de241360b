"""Endpoint helpers for the Raksha Sahayak REST API (internal)."""
