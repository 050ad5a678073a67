import re
import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import TextIO

_NUMERIC_LEVEL = re.compile(r'^[0-9]+$')


class LogLevel(IntEnum):
	"""
	Syslog style severities, lower number means more severe.
	TRACE is an extra level below DEBUG which also traces external commands.
	"""
	EMERGENCY = 0
	ALERT = 1
	CRITICAL = 2
	ERROR = 3
	WARNING = 4
	NOTICE = 5
	INFO = 6
	DEBUG = 7
	TRACE = 8

	@classmethod
	def from_name(cls, name: str) -> 'LogLevel | None':
		# Names are case sensitive, 'info' is not a level
		return _LEVEL_NAMES.get(name)

	@classmethod
	def from_number(cls, number: int) -> 'LogLevel | None':
		try:
			return cls(number)
		except ValueError:
			return None


_LEVEL_NAMES: dict[str, LogLevel] = {
	'EMERG': LogLevel.EMERGENCY,
	'EMERGENCY': LogLevel.EMERGENCY,
	'ALERT': LogLevel.ALERT,
	'CRIT': LogLevel.CRITICAL,
	'CRITICAL': LogLevel.CRITICAL,
	'ERR': LogLevel.ERROR,
	'ERROR': LogLevel.ERROR,
	'WARN': LogLevel.WARNING,
	'WARNING': LogLevel.WARNING,
	'NOT': LogLevel.NOTICE,
	'NOTICE': LogLevel.NOTICE,
	'INFO': LogLevel.INFO,
	'DBG': LogLevel.DEBUG,
	'DEBUG': LogLevel.DEBUG,
	'TRACE': LogLevel.TRACE,
}


def translate(value: LogLevel | int | str | None) -> LogLevel | None:
	"""
	Resolves a level given either as a number (or a string of digits)
	or as a level name / alias. Returns None when neither form matches.
	"""
	if isinstance(value, LogLevel):
		return value

	if isinstance(value, bool) or value is None:
		return None

	if isinstance(value, int):
		return LogLevel.from_number(value)

	if _NUMERIC_LEVEL.match(value):
		return LogLevel.from_number(int(value))

	return LogLevel.from_name(value)


@dataclass(frozen=True)
class LogContext:
	tool_name: str = 'subvols'
	threshold: LogLevel = LogLevel.INFO
	default_level: LogLevel = LogLevel.INFO
	stream: TextIO | None = None

	@classmethod
	def from_settings(
		cls,
		tool_name: str,
		level: str | None,
		default_level: str | None,
		stream: TextIO | None = None,
	) -> 'LogContext':
		"""
		Builds the context once at start-up. Unknown levels fall back
		(default level to INFO, threshold to the default level) and are
		reported at ERROR through the freshly built context.
		"""
		problems = []

		default = translate(default_level)
		if default is None:
			default = LogLevel.INFO
			problems.append(f"Provided default log level '{default_level}' is not known. Defaulting to '{default.name}'.")

		if level:
			threshold = translate(level)
			if threshold is None:
				threshold = default
				problems.append(f"Provided Log level '{level}' is not known. Defaulting to '{default.name}'.")
		else:
			threshold = default

		context = cls(tool_name=tool_name, threshold=threshold, default_level=default, stream=stream)

		for problem in problems:
			context.error(problem)

		return context

	@property
	def out(self) -> TextIO:
		return self.stream or sys.stderr

	def enabled(self, level: LogLevel) -> bool:
		return level <= self.threshold

	def log(self, level: LogLevel | int | str | None, *msgs: str) -> None:
		resolved = translate(level)

		if resolved is None:
			self._write(LogLevel.ERROR, f"Unknown log level '{level}'. Using '{self.default_level.name}'.")
			resolved = self.default_level

		self._write(resolved, ' '.join([str(x) for x in msgs]))

	def _write(self, level: LogLevel, text: str) -> None:
		if not self.enabled(level):
			return

		self.out.write(f'[{self.tool_name}] {level.name:<7}: {text}\n')
		self.out.flush()

	def alert(self, *msgs: str) -> None:
		self.log(LogLevel.ALERT, *msgs)

	def error(self, *msgs: str) -> None:
		self.log(LogLevel.ERROR, *msgs)

	def warn(self, *msgs: str) -> None:
		self.log(LogLevel.WARNING, *msgs)

	def notice(self, *msgs: str) -> None:
		self.log(LogLevel.NOTICE, *msgs)

	def info(self, *msgs: str) -> None:
		self.log(LogLevel.INFO, *msgs)

	def debug(self, *msgs: str) -> None:
		self.log(LogLevel.DEBUG, *msgs)

	def trace(self, *msgs: str) -> None:
		self.log(LogLevel.TRACE, *msgs)
