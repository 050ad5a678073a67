"""Volume subvolume layout converter - run once before dependent services start."""

from .lib.exceptions import ConversionBlocked, FilesystemError, RequirementError, SysCallError
from .lib.output import LogContext, LogLevel, translate
from .main import main, run

__all__ = [
	'ConversionBlocked',
	'FilesystemError',
	'LogContext',
	'LogLevel',
	'RequirementError',
	'SysCallError',
	'main',
	'run',
	'translate',
]
