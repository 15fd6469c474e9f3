import logging
import typing


logger = logging.getLogger(__name__)


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	Named synchronous events for grid changes and playback steps.

	Everything in drumscribe runs on one thread, so listeners are called
	in registration order, inline, from ``emit()``.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty listener registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def has_listeners (self, event_name: str) -> bool:

		return bool(self._listeners.get(event_name))


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for ``event_name``.

		A failing listener is logged and does not prevent the others from
		running; a broken UI hook must not stall the transport.
		"""

		for callback in list(self._listeners.get(event_name, [])):

			try:
				callback(*args, **kwargs)
			except Exception:
				logger.exception(f"Listener for {event_name!r} failed")
