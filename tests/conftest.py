import io
import shutil
from pathlib import Path

import pytest

from subvols.lib.exceptions import FilesystemError, RequirementError
from subvols.lib.filesystem import Toolset
from subvols.lib.output import LogContext, LogLevel


class FakeToolset(Toolset):
	"""
	Performs the filesystem operations in plain Python and records every
	call. Operations named in ``failing`` raise FilesystemError instead,
	either for every path (``'remove'``) or for one name
	(``'create_subvolume:@snapshots'``).
	"""

	def __init__(self, context: LogContext) -> None:
		super().__init__(context)
		self.calls: list[tuple[str, Path]] = []
		self.subvolumes: set[Path] = set()
		self.failing: set[str] = set()
		self.has_btrfs = True

	def _record(self, op: str, path: Path) -> None:
		self.calls.append((op, path))

		if op in self.failing or f'{op}:{path.name}' in self.failing:
			raise FilesystemError(f'{op} {path.name} failed with exit code [1]')

	@property
	def operations(self) -> list[str]:
		return [op for op, _ in self.calls]

	def touched(self, volume: Path) -> bool:
		return any(path == volume or volume in path.parents for _, path in self.calls)

	def require_subvolume_support(self) -> None:
		if not self.has_btrfs:
			raise RequirementError('Binary btrfs does not exist.')

	def is_subvolume(self, path: Path) -> bool:
		return path in self.subvolumes

	def create_subvolume(self, path: Path) -> None:
		self._record('create_subvolume', path)
		path.mkdir()
		self.subvolumes.add(path)

	def mkdir(self, path: Path) -> None:
		self._record('mkdir', path)
		path.mkdir()

	def reflink_copy(self, entries: list[Path], destination: Path) -> None:
		self._record('reflink_copy', destination)

		for entry in entries:
			if entry.is_dir() and not entry.is_symlink():
				shutil.copytree(entry, destination / entry.name, symlinks=True)
			else:
				shutil.copy2(entry, destination / entry.name, follow_symlinks=False)

	def move(self, entries: list[Path], destination: Path) -> None:
		self._record('move', destination)

		for entry in entries:
			shutil.move(entry, destination / entry.name)

	def remove(self, entries: list[Path]) -> None:
		self._record('remove', entries[0].parent)

		for entry in entries:
			if entry.is_dir() and not entry.is_symlink():
				shutil.rmtree(entry)
			else:
				entry.unlink()


class Mounts:
	"""
	A mount root below tmp_path plus the mount table describing it.
	"""

	def __init__(self, base: Path) -> None:
		self.root = base / 'mnt'
		self.root.mkdir()
		self.mtab = base / 'mtab'
		self._lines = [
			'proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0',
			'overlay / overlay rw,relatime,lowerdir=/var/lib/docker/l 0 0',
		]
		self._write()

	def _write(self) -> None:
		self.mtab.write_text('\n'.join(self._lines) + '\n')

	def add_entry(self, target: Path, fstype: str = 'btrfs', options: str = 'rw,relatime', source: str = '/dev/sdb1') -> None:
		escaped = str(target).replace('\\', '\\134').replace(' ', '\\040')
		self._lines.append(f'{source} {escaped} {fstype} {options} 0 0')
		self._write()

	def remove_entry(self, target: Path) -> None:
		self._lines = [line for line in self._lines if line.split()[1] != str(target)]
		self._write()

	def volume(
		self,
		name: str,
		fstype: str = 'btrfs',
		options: str = 'rw,relatime',
		files: dict[str, str] | None = None,
	) -> Path:
		path = self.root / name
		path.mkdir()

		for relative, content in (files or {}).items():
			file = path / relative
			file.parent.mkdir(parents=True, exist_ok=True)
			file.write_text(content)

		self.add_entry(path, fstype, options)
		return path


@pytest.fixture
def log_stream() -> io.StringIO:
	return io.StringIO()


@pytest.fixture
def context(log_stream: io.StringIO) -> LogContext:
	return LogContext(tool_name='subvols', threshold=LogLevel.DEBUG, default_level=LogLevel.INFO, stream=log_stream)


@pytest.fixture
def tools(context: LogContext) -> FakeToolset:
	return FakeToolset(context)


@pytest.fixture
def mounts(tmp_path: Path) -> Mounts:
	return Mounts(tmp_path)


@pytest.fixture
def sample_files() -> dict[str, str]:
	return {
		'config.yaml': 'listen: 0.0.0.0\n',
		'data/db.sqlite': 'SQLite format 3',
		'data/blobs/a': 'a',
		'.hidden': 'dotfile',
	}
