import argparse
import math
import os
from argparse import ArgumentParser
from collections.abc import Mapping
from importlib.metadata import version
from pathlib import Path
from typing import TextIO

from pydantic.dataclasses import dataclass as p_dataclass

from .alarm import BlockingAlarm
from .mounts import DEFAULT_MTAB, DEFAULT_ROOT
from .output import LogContext, LogLevel, translate

DEFAULT_ERROR_STOP_INTERVAL = 10.0


@p_dataclass
class Arguments:
	root: Path = DEFAULT_ROOT
	mtab: Path = DEFAULT_MTAB
	name: str = 'subvols'


@p_dataclass
class Environment:
	log_level: str | None = None
	log_level_default: str = 'INFO'
	error_stop_level: str = 'ALERT'
	error_stop_interval: str = str(DEFAULT_ERROR_STOP_INTERVAL)

	@classmethod
	def from_environ(cls, environ: Mapping[str, str]) -> 'Environment':
		return cls(
			log_level=environ.get('LOG_LEVEL') or None,
			log_level_default=environ.get('LOG_LEVEL_DEFAULT') or 'INFO',
			error_stop_level=environ.get('ERROR_STOP_LEVEL') or 'ALERT',
			error_stop_interval=environ.get('ERROR_STOP_INTERVALSEC') or str(DEFAULT_ERROR_STOP_INTERVAL),
		)


class ConfigHandler:
	"""
	Command line arguments plus the environment, read exactly once.
	"""

	def __init__(self, argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> None:
		self._parser: ArgumentParser = self._define_arguments()
		self._args: Arguments = self._parse_args(argv)
		self._env = Environment.from_environ(os.environ if environ is None else environ)

	@property
	def args(self) -> Arguments:
		return self._args

	@property
	def env(self) -> Environment:
		return self._env

	def _get_version(self) -> str:
		try:
			return version('subvols')
		except Exception:
			return 'subvols version not found'

	def _define_arguments(self) -> ArgumentParser:
		parser = ArgumentParser(
			description='Convert the volumes mounted under a root directory to an @ / @snapshots subvolume layout.',
			epilog='Environment: LOG_LEVEL, LOG_LEVEL_DEFAULT, ERROR_STOP_LEVEL, ERROR_STOP_INTERVALSEC',
			formatter_class=argparse.ArgumentDefaultsHelpFormatter,
		)
		parser.add_argument(
			'-v',
			'--version',
			action='version',
			version='%(prog)s ' + self._get_version(),
		)
		parser.add_argument(
			'--root',
			type=Path,
			default=DEFAULT_ROOT,
			help='Directory whose first level mounts are converted',
		)
		parser.add_argument(
			'--mtab',
			type=Path,
			default=DEFAULT_MTAB,
			help='Mount table to read the volumes from',
		)
		parser.add_argument(
			'--name',
			type=str,
			default='subvols',
			help='Name shown in front of every log line',
		)

		return parser

	def _parse_args(self, argv: list[str] | None) -> Arguments:
		argparse_args = vars(self._parser.parse_args(argv))
		return Arguments(**argparse_args)

	def log_context(self, stream: TextIO | None = None) -> LogContext:
		return LogContext.from_settings(
			self._args.name,
			self._env.log_level,
			self._env.log_level_default,
			stream=stream,
		)

	def alarm_level(self, context: LogContext) -> LogLevel:
		if (level := translate(self._env.error_stop_level)) is None:
			context.error(f"Provided alarm level '{self._env.error_stop_level}' is not known. Defaulting to 'ALERT'.")
			return LogLevel.ALERT

		return level

	def alarm_interval(self, context: LogContext) -> float:
		try:
			interval = float(self._env.error_stop_interval)
		except ValueError:
			interval = 0

		if not (interval > 0 and math.isfinite(interval)):
			context.error(
				f"Provided alarm interval '{self._env.error_stop_interval}' is not a positive number of seconds. "
				f"Defaulting to '{DEFAULT_ERROR_STOP_INTERVAL:g}'."
			)
			return DEFAULT_ERROR_STOP_INTERVAL

		return interval

	def blocking_alarm(self, context: LogContext) -> BlockingAlarm:
		return BlockingAlarm(context, self.alarm_level(context), self.alarm_interval(context))
