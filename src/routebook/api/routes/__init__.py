"""Route group exports."""

from . import clients, data, geocoding, health, routes, week

__all__ = ["clients", "data", "geocoding", "health", "routes", "week"]
