import inspect
import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	A simple synchronous event emitter.

	Listeners run in registration order inside :meth:`emit`, so by the time
	``emit`` returns every listener has seen the event.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty event registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.

		Raises ``ValueError`` for coroutine functions, which ``emit`` cannot await.
		"""

		if inspect.iscoroutinefunction(callback):
			raise ValueError(f"Async callback cannot listen to {event_name!r}")

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if event_name not in self._listeners or callback not in self._listeners[event_name]:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for the event with the given arguments.
		"""

		for callback in list(self._listeners.get(event_name, [])):
			callback(*args, **kwargs)


	def listener_count (self, event_name: str) -> int:

		"""Return how many callbacks are registered for an event."""

		return len(self._listeners.get(event_name, []))
