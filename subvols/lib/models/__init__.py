from .mount import MountEntry, MountTable
from .volume import (
	ERROR_MARKER,
	MARKER,
	SNAPSHOTS_DIR,
	WORKING_DIR,
	Readiness,
	RunSummary,
	VolumeState,
	probe_state,
	root_entries,
)

__all__ = [
	'ERROR_MARKER',
	'MARKER',
	'SNAPSHOTS_DIR',
	'WORKING_DIR',
	'MountEntry',
	'MountTable',
	'Readiness',
	'RunSummary',
	'VolumeState',
	'probe_state',
	'root_entries',
]
