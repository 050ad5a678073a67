import os
import shlex
import subprocess
from shutil import which

from .exceptions import RequirementError, SysCallError
from .output import LogContext


def locate_binary(name: str) -> str:
	if path := which(name):
		return path
	raise RequirementError(f"Binary {name} does not exist.")


def _log_cmd(context: LogContext | None, cmd: list[str]) -> None:
	if context is not None:
		context.trace(f'+ {shlex.join(cmd)}')


def run(
	cmd: list[str],
	context: LogContext | None = None,
) -> subprocess.CompletedProcess[bytes]:
	"""
	Runs ``cmd`` to completion with stdout and stderr merged.
	A non-zero exit raises SysCallError carrying the tail of the output.
	"""
	cmd = [locate_binary(cmd[0]), *cmd[1:]]
	_log_cmd(context, cmd)

	try:
		return subprocess.run(
			cmd,
			stdout=subprocess.PIPE,
			stderr=subprocess.STDOUT,
			env={**os.environ, 'LC_ALL': 'C'},
			check=True
		)
	except subprocess.CalledProcessError as err:
		output = err.output or b''
		text = output.decode('utf-8', errors='backslashreplace').strip()
		raise SysCallError(
			f"{cmd} exited with abnormal exit code [{err.returncode}]: {text[-500:]}",
			err.returncode,
			worker_log=output
		)
