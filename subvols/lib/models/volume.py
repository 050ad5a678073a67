from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import override

MARKER = '.subvols'
ERROR_MARKER = '.subvols_error'
WORKING_DIR = '@'
SNAPSHOTS_DIR = '@snapshots'


class VolumeState(Enum):
	Unconverted = 'unconverted'
	Converted = 'converted'
	Failed = 'failed'


class Readiness(Enum):
	Converted = 'already converted'
	Ready = 'ready to be converted'


def probe_state(volume: Path) -> VolumeState:
	"""
	The single place where marker files are turned into a state.
	A completion marker wins over an error marker.
	"""
	if (volume / MARKER).exists():
		return VolumeState.Converted

	if (volume / ERROR_MARKER).exists():
		return VolumeState.Failed

	return VolumeState.Unconverted


def root_entries(volume: Path, *keep: str) -> list[Path]:
	"""
	Top level entries of the volume root that still have to be migrated:
	everything except the working directory and the names in ``keep``.
	"""
	skip = {WORKING_DIR, *keep}
	return sorted(entry for entry in volume.iterdir() if entry.name not in skip)


@dataclass
class RunSummary:
	all_mounts: int = 0
	changed_mounts: int = 0

	@override
	def __str__(self) -> str:
		return f'Of all the {self.all_mounts} mountpoints, {self.changed_mounts} successfully converted.'
