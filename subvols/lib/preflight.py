from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ConversionBlocked, RequirementError
from .filesystem import Toolset
from .models.mount import MountTable
from .models.volume import SNAPSHOTS_DIR, WORKING_DIR, Readiness, VolumeState, probe_state
from .mounts import DEFAULT_MTAB, DEFAULT_ROOT, read_mount_table
from .output import LogContext


@dataclass
class PreflightReport:
	volumes: dict[Path, Readiness] = field(default_factory=dict)

	@property
	def ready(self) -> list[Path]:
		return [path for path, readiness in self.volumes.items() if readiness == Readiness.Ready]

	@property
	def converted(self) -> list[Path]:
		return [path for path, readiness in self.volumes.items() if readiness == Readiness.Converted]

	def state(self, volume: Path) -> VolumeState:
		# Failed volumes never make it into a report
		if self.volumes[volume] == Readiness.Converted:
			return VolumeState.Converted
		return VolumeState.Unconverted


class Preflight:
	"""
	Read-only validation of every volume before anything is changed.
	Any finding that makes a conversion unsafe raises ConversionBlocked.
	"""

	def __init__(
		self,
		context: LogContext,
		tools: Toolset,
		root: Path = DEFAULT_ROOT,
		mtab: Path = DEFAULT_MTAB,
	) -> None:
		self._context = context
		self._tools = tools
		self._root = root
		self._mtab = mtab

	def check_structure(self, table: MountTable) -> None:
		if nested := table.nested_below(self._root):
			raise ConversionBlocked(
				*[f'There are mounts deeper than first level under {self._root}. Mountpoint: {target}' for target in nested]
			)

	def check_volume(self, volume: Path, table: MountTable) -> Readiness:
		state = probe_state(volume)

		if state == VolumeState.Converted:
			self._context.debug(f"Volume '{volume}' already done. Skipping.")
			return Readiness.Converted

		entry = table.find(volume)

		if entry is None:
			raise ConversionBlocked(f"Volume '{volume}' is not in the mount table. Cannot continue.")

		if entry.read_only:
			raise ConversionBlocked(f"Volume '{volume}' is read-only. Cannot continue.")

		if state == VolumeState.Failed:
			raise ConversionBlocked(f"Volume '{volume}' failed in an earlier run. Cannot continue until fixed.")

		working = volume / WORKING_DIR
		if working.is_symlink() or (working.exists() and not working.is_dir()):
			raise ConversionBlocked(f"Directory '{WORKING_DIR}' exists in '{volume}' but is not a directory. Cannot continue until fixed.")

		if entry.subvolume_capable:
			try:
				self._tools.require_subvolume_support()
			except RequirementError as err:
				raise ConversionBlocked(f"Volume '{volume}' is on {entry.fstype} but the tools are missing: {err}")

			# Leftovers from an earlier run are reused only if they are subvolumes
			for name in (WORKING_DIR, SNAPSHOTS_DIR):
				path = volume / name
				if (path.exists() or path.is_symlink()) and not self._tools.is_subvolume(path):
					raise ConversionBlocked(f"'{path}' exists in '{volume}' but is not a btrfs subvolume. Cannot continue until fixed.")

		self._context.info(f"Volume '{volume}' is ready to be converted.")
		return Readiness.Ready

	def run(self, volumes: list[Path]) -> PreflightReport:
		table = read_mount_table(self._mtab)
		self.check_structure(table)

		report = PreflightReport()
		for volume in volumes:
			report.volumes[volume] = self.check_volume(volume, table)

		return report
