import shutil
from pathlib import Path

from .exceptions import FilesystemError, RequirementError, SysCallError
from .general import locate_binary, run
from .output import LogContext

BTRFS_SUBVOLUME_INODE = 256


def _describe(err: OSError) -> str:
	if err.filename is not None:
		return f'{err.strerror or err} ({err.filename})'
	return str(err)


class Toolset:
	"""
	The filesystem operations the conversion relies on. Each operation
	either succeeds or raises FilesystemError with a reason string.
	"""

	def __init__(self, context: LogContext) -> None:
		self._context = context

	def require_subvolume_support(self) -> None:
		locate_binary('btrfs')

	def is_subvolume(self, path: Path) -> bool:
		# The root directory of every btrfs subvolume has inode number 256
		return path.is_dir() and not path.is_symlink() and path.stat().st_ino == BTRFS_SUBVOLUME_INODE

	def create_subvolume(self, path: Path) -> None:
		try:
			run(['btrfs', 'subvolume', 'create', str(path)], self._context)
		except (SysCallError, RequirementError) as err:
			raise FilesystemError(str(err))

	def mkdir(self, path: Path) -> None:
		try:
			path.mkdir()
		except OSError as err:
			raise FilesystemError(_describe(err))

	def reflink_copy(self, entries: list[Path], destination: Path) -> None:
		if not entries:
			return

		cmd = [
			'cp',
			'--archive',
			'--reflink=always',
			'--target-directory',
			str(destination),
			'--',
			*[str(entry) for entry in entries],
		]

		try:
			run(cmd, self._context)
		except (SysCallError, RequirementError) as err:
			raise FilesystemError(str(err))

	def move(self, entries: list[Path], destination: Path) -> None:
		for entry in entries:
			target = destination / entry.name
			self._context.trace(f'+ move {entry} -> {target}')

			if target.exists() or target.is_symlink():
				raise FilesystemError(f'{target} already exists')

			try:
				shutil.move(entry, target)
			except OSError as err:
				raise FilesystemError(_describe(err))

	def remove(self, entries: list[Path]) -> None:
		for entry in entries:
			self._context.trace(f'+ remove {entry}')
			try:
				if entry.is_dir() and not entry.is_symlink():
					shutil.rmtree(entry)
				else:
					entry.unlink()
			except OSError as err:
				raise FilesystemError(_describe(err))
