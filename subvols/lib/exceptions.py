class RequirementError(Exception):
	pass


class SysCallError(Exception):
	def __init__(self, message: str, exit_code: int | None = None, worker_log: bytes = b'') -> None:
		super().__init__(message)
		self.message = message
		self.exit_code = exit_code
		self.worker_log = worker_log


class FilesystemError(Exception):
	"""
	Raised by the toolset when a filesystem operation fails.
	``reason`` is written verbatim into the error marker.
	"""

	def __init__(self, reason: str) -> None:
		super().__init__(reason)
		self.reason = reason


class ConversionBlocked(Exception):
	"""
	A fatal condition was found. The run must not proceed and dependents
	must not start; the driver hands ``alerts`` to the blocking alarm.
	"""

	def __init__(self, *alerts: str) -> None:
		super().__init__('; '.join(alerts))
		self.alerts = list(alerts)
