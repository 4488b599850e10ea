"""Service layer for incident risk modelling."""
