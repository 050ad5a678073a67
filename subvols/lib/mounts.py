from pathlib import Path

from .models.mount import MountTable

DEFAULT_MTAB = Path('/etc/mtab')
DEFAULT_ROOT = Path('/mnt')


def read_mount_table(mtab: Path = DEFAULT_MTAB) -> MountTable:
	"""
	Reads the live mount table. Every call reads the file again,
	callers must not hold on to the result between passes.
	"""
	return MountTable.parse(mtab.read_text(encoding='utf-8', errors='surrogateescape'))


def enumerate_volumes(root: Path = DEFAULT_ROOT, mtab: Path = DEFAULT_MTAB) -> list[Path]:
	return read_mount_table(mtab).children_of(root)
