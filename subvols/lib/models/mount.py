from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

SUBVOLUME_FILESYSTEMS = ('btrfs',)

_OCTAL_ESCAPE = re.compile(r'\\([0-7]{3})')


def unescape_mtab(field: str) -> str:
	"""
	The kernel escapes space, tab, newline and backslash in
	mount table fields as three digit octal sequences, e.g. \\040
	"""
	return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


class MountEntry(BaseModel):
	source: str
	target: Path
	fstype: str
	options: list[str] = Field(default_factory=list)
	dump: int = 0
	passno: int = 0

	@field_validator('options', mode='before')
	@classmethod
	def split_options(cls, v: str | list[str]) -> list[str]:
		if isinstance(v, str):
			return [o for o in v.split(',') if o]
		return v

	@classmethod
	def from_line(cls, line: str) -> MountEntry | None:
		fields = line.split()

		if len(fields) < 4:
			return None

		return cls(
			source=unescape_mtab(fields[0]),
			target=Path(unescape_mtab(fields[1])),
			fstype=fields[2],
			options=fields[3],
			dump=int(fields[4]) if len(fields) > 4 and fields[4].isdigit() else 0,
			passno=int(fields[5]) if len(fields) > 5 and fields[5].isdigit() else 0,
		)

	@property
	def read_only(self) -> bool:
		return 'ro' in self.options

	@property
	def subvolume_capable(self) -> bool:
		return self.fstype in SUBVOLUME_FILESYSTEMS

	def depth_below(self, root: Path) -> int | None:
		"""
		Number of path components between ``root`` and this mount,
		1 for a direct child. None when the mount is not below ``root``.
		"""
		try:
			relative = self.target.relative_to(root)
		except ValueError:
			return None

		return len(relative.parts) or None


class MountTable(BaseModel):
	entries: list[MountEntry] = Field(default_factory=list)

	@classmethod
	def parse(cls, data: str) -> MountTable:
		entries = []

		for line in data.splitlines():
			if not (line := line.strip()) or line.startswith('#'):
				continue

			if entry := MountEntry.from_line(line):
				entries.append(entry)

		return cls(entries=entries)

	def find(self, target: Path) -> MountEntry | None:
		# The last entry wins when a path is mounted over more than once
		found = None
		for entry in self.entries:
			if entry.target == target:
				found = entry

		return found

	def children_of(self, root: Path) -> list[Path]:
		return [entry.target for entry in self.entries if entry.depth_below(root) == 1]

	def nested_below(self, root: Path) -> list[Path]:
		return [entry.target for entry in self.entries if (entry.depth_below(root) or 0) >= 2]
