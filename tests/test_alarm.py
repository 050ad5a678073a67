import io
import signal

import pytest
from pytest import MonkeyPatch

from subvols.lib.alarm import CLOSING_INSTRUCTION, BlockingAlarm
from subvols.lib.output import LogContext, LogLevel


class _StopAlarm(Exception):
	pass


class _Sleeper:
	def __init__(self, rounds: int) -> None:
		self.rounds = rounds
		self.intervals: list[float] = []

	def __call__(self, interval: float) -> None:
		self.intervals.append(interval)
		if len(self.intervals) >= self.rounds:
			raise _StopAlarm()


def test_alarm_repeats_alerts(monkeypatch: MonkeyPatch, context: LogContext, log_stream: io.StringIO) -> None:
	monkeypatch.setattr(signal, 'signal', lambda signum, handler: None)
	sleeper = _Sleeper(rounds=3)
	alarm = BlockingAlarm(context, LogLevel.ALERT, 2.5, sleep=sleeper)

	with pytest.raises(_StopAlarm):
		alarm.sound(['first problem', 'second problem'])

	assert sleeper.intervals == [2.5, 2.5, 2.5]
	assert log_stream.getvalue().splitlines() == [
		'[subvols] ALERT  : first problem',
		'[subvols] ALERT  : second problem',
		f'[subvols] ALERT  : {CLOSING_INSTRUCTION}',
	] * 3


def test_alarm_uses_configured_level(monkeypatch: MonkeyPatch, log_stream: io.StringIO) -> None:
	monkeypatch.setattr(signal, 'signal', lambda signum, handler: None)
	context = LogContext(threshold=LogLevel.WARNING, stream=log_stream)
	alarm = BlockingAlarm(context, LogLevel.CRITICAL, 1, sleep=_Sleeper(rounds=1))

	with pytest.raises(_StopAlarm):
		alarm.sound(['disk on fire'])

	assert log_stream.getvalue().startswith('[subvols] CRITICAL: disk on fire\n')


def test_interrupt_does_not_stop_the_alarm(monkeypatch: MonkeyPatch, context: LogContext, log_stream: io.StringIO) -> None:
	handlers = {}
	monkeypatch.setattr(signal, 'signal', lambda signum, handler: handlers.setdefault(signum, handler))

	def interrupted_sleep(interval: float) -> None:
		handlers[signal.SIGINT](signal.SIGINT, None)
		handlers[signal.SIGINT](signal.SIGINT, None)
		raise _StopAlarm()

	alarm = BlockingAlarm(context, sleep=interrupted_sleep)

	with pytest.raises(_StopAlarm):
		alarm.sound(['stuck'])

	assert log_stream.getvalue().endswith(f'{CLOSING_INSTRUCTION}\n..')
