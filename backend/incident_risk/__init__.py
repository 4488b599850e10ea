"""Incident risk classifier training and evaluation."""

__version__ = "0.1.0"
