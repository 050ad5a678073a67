import signal
import time
from collections.abc import Callable
from types import FrameType
from typing import NoReturn

from .output import LogContext, LogLevel

CLOSING_INSTRUCTION = "Will now stop. Shut this down by issuing 'docker compose down'"


class BlockingAlarm:
	"""
	Keeps the process alive and complaining instead of exiting.

	An exit would tell whatever supervises us that we are done and let
	dependent services start. So after a fatal condition we repeat the
	alerts forever and only external termination ends the process.
	"""

	def __init__(
		self,
		context: LogContext,
		level: LogLevel = LogLevel.ALERT,
		interval: float = 10,
		sleep: Callable[[float], None] = time.sleep,
	) -> None:
		self._context = context
		self._level = level
		self._interval = interval
		self._sleep = sleep

	def _on_interrupt(self, signum: int, frame: FrameType | None) -> None:
		# Show that the interrupt arrived, but keep blocking
		self._context.out.write('.')
		self._context.out.flush()

	def sound(self, alerts: list[str]) -> NoReturn:
		signal.signal(signal.SIGINT, self._on_interrupt)

		while True:
			for alert in alerts:
				self._context.log(self._level, alert)

			self._context.log(self._level, CLOSING_INSTRUCTION)
			self._sleep(self._interval)
