"""Gateways to external collaborators."""
