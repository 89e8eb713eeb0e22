"""Itera: AI trip planning orchestration on top of the Gemini API."""

from itera.monitoring import configure_logging
from itera.services.planner import Planner

__all__ = ["Planner", "configure_logging"]

__version__ = "0.1.0"
