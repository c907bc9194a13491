"""Simple Event Bus / Observer implementation for pantry alerts.

Event names:
  pantry.low_stock -> payload {"ingredient": Ingredient, "remaining": float, "threshold": float}
  pantry.near_expiry -> payload {"ingredient": Ingredient, "expired": bool, "days_left": int, "threshold": int}

Subscribers are callables taking (event_name, payload). The bus is an
ordinary object handed to whoever publishes; there is no global instance.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PANTRY_LOW_STOCK = "pantry.low_stock"
PANTRY_NEAR_EXPIRY = "pantry.near_expiry"

Subscriber = Callable[[str, Any], None]


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)
		self._lock = Lock()

	def subscribe(self, event_name: str, callback: Subscriber):
		with self._lock:
			if callback not in self._subscribers[event_name]:
				self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Subscriber):
		with self._lock:
			try:
				self._subscribers[event_name].remove(callback)
			except ValueError:
				pass

	def publish(self, event_name: str, payload: Any):
		with self._lock:
			callbacks = list(self._subscribers.get(event_name, []))
		for cb in callbacks:
			try:
				cb(event_name, payload)
			except Exception:
				# a failing subscriber must not break the publisher's operation
				logger.exception(f"Error delivering {event_name} to {cb!r}")


__all__ = ['EventBus', 'Subscriber', 'PANTRY_LOW_STOCK', 'PANTRY_NEAR_EXPIRY']
