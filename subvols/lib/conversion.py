from pathlib import Path
from typing import NoReturn

from .exceptions import ConversionBlocked, FilesystemError
from .filesystem import Toolset
from .models.volume import (
	ERROR_MARKER,
	MARKER,
	SNAPSHOTS_DIR,
	WORKING_DIR,
	RunSummary,
	VolumeState,
	probe_state,
	root_entries,
)
from .mounts import DEFAULT_MTAB, read_mount_table
from .output import LogContext
from .preflight import PreflightReport


class Converter:
	"""
	Moves the contents of each volume root into ``@``.

	On btrfs ``@`` and ``@snapshots`` are subvolumes and the data is
	reflink copied and then removed from the root, so no subvolume ever
	ends up nested inside the old root. Elsewhere ``@`` is a plain
	directory and the data is moved.

	Every failed step leaves ``.subvols_error`` behind and raises
	ConversionBlocked; ``.subvols`` is written last.
	"""

	def __init__(self, context: LogContext, tools: Toolset, mtab: Path = DEFAULT_MTAB) -> None:
		self._context = context
		self._tools = tools
		self._mtab = mtab

	def _fail(self, volume: Path, diagnostic: str, alert: str) -> NoReturn:
		error_marker = volume / ERROR_MARKER
		self._context.error(f"'{volume}': {diagnostic}")

		try:
			error_marker.write_text(f'{diagnostic}\n')
		except OSError as err:
			raise ConversionBlocked(alert, f"Could not write '{error_marker}' either: {err}")

		raise ConversionBlocked(alert)

	def convert(self, volume: Path, state: VolumeState | None = None) -> VolumeState:
		if state is None:
			state = probe_state(volume)

		if state == VolumeState.Converted:
			return state

		if state == VolumeState.Failed:
			raise ConversionBlocked(f"Volume '{volume}' failed in an earlier run. Cannot continue until fixed.")

		self._context.info(f"Processing volume '{volume}' for conversion.")

		# Read again, the table may have changed since preflight
		if (entry := read_mount_table(self._mtab).find(volume)) is None:
			raise ConversionBlocked(f"Volume '{volume}' is no longer mounted. Cannot continue.")

		if entry.subvolume_capable:
			self._context.debug(f"'{volume}' is on a {entry.fstype} filesystem.")
			self._convert_subvolumes(volume)
		else:
			self._context.debug(f"'{volume}' is NOT on a subvolume capable filesystem ({entry.fstype}).")
			self._convert_directory(volume)

		self._context.debug(f"'{volume}', writing '{MARKER}' to indicate all went well.")
		try:
			(volume / MARKER).touch(exist_ok=False)
		except OSError as err:
			self._fail(volume, f"Error writing '{MARKER}' here: {err}", f"Writing the completion marker in '{volume}' failed.")

		return VolumeState.Converted

	def _existing_subvolume(self, volume: Path, subvolume: Path) -> bool:
		"""
		True when ``subvolume`` is left over from an earlier run.
		Anything else occupying the name fails the volume.
		"""
		if not (subvolume.exists() or subvolume.is_symlink()):
			return False

		if not self._tools.is_subvolume(subvolume):
			self._fail(
				volume,
				f"Error '{subvolume.name}' exists here but is not a subvolume.",
				f"'{subvolume}' exists and is not a btrfs subvolume.",
			)

		return True

	def _ensure_subvolume(self, volume: Path, subvolume: Path) -> None:
		if self._existing_subvolume(volume, subvolume):
			self._context.notice(f"'{subvolume}' subvolume exists from an earlier run, reusing it.")
			return

		try:
			self._tools.create_subvolume(subvolume)
		except FilesystemError as err:
			self._fail(volume, f"Error creating subvolume '{subvolume.name}' here: {err.reason}", f"Creation of btrfs subvolume '{subvolume}' failed.")

		self._context.debug(f"'{subvolume}' subvolume created.")

	def _convert_subvolumes(self, volume: Path) -> None:
		working = volume / WORKING_DIR
		snapshots = volume / SNAPSHOTS_DIR

		# A leftover @snapshots must be a subvolume before anything is written
		self._existing_subvolume(volume, snapshots)
		self._ensure_subvolume(volume, working)

		if entries := root_entries(volume, SNAPSHOTS_DIR):
			self._context.debug(f"'{volume}', copying into subvolume '{WORKING_DIR}'")
			try:
				self._tools.reflink_copy(entries, working)
			except FilesystemError as err:
				self._fail(volume, f"Error copying data into subvolume '{WORKING_DIR}' here: {err.reason}", f"Copying data to subvolume '{working}' failed.")

			self._context.debug(f"'{volume}' data copied to subvolume '{WORKING_DIR}'.")
			self._context.debug(f"'{volume}', removing old data.")

			try:
				self._tools.remove(entries)
			except FilesystemError as err:
				self._fail(
					volume,
					f"Error removing old data from here. Copying finished okay: {err.reason}",
					f"Removing old data from volume root '{volume}' failed.",
				)

			self._context.debug(f"'{volume}' old data removed.")
		else:
			self._context.info(f"'{volume}' is a new volume. No moving of data needed.")

		self._ensure_subvolume(volume, snapshots)

	def _convert_directory(self, volume: Path) -> None:
		working = volume / WORKING_DIR

		if working.is_dir():
			self._context.notice(f"'{working}' directory exists from an earlier run, reusing it.")
		else:
			try:
				self._tools.mkdir(working)
			except FilesystemError as err:
				self._fail(volume, f"Error creating directory '{WORKING_DIR}' here: {err.reason}", f"Creation of directory '{working}' failed.")

			self._context.debug(f"'{working}' directory created.")

		if entries := root_entries(volume):
			self._context.debug(f"'{volume}', moving into directory '{WORKING_DIR}'")
			try:
				self._tools.move(entries, working)
			except FilesystemError as err:
				self._fail(volume, f"Error moving data into directory '{WORKING_DIR}' here: {err.reason}", f"Moving data to directory '{working}' failed.")

			self._context.debug(f"'{volume}' data moved to directory '{WORKING_DIR}'.")
		else:
			self._context.info(f"'{volume}' is a new volume. No moving of data needed.")

	def convert_all(self, volumes: list[Path], report: PreflightReport | None = None) -> RunSummary:
		"""
		Converts ``volumes`` in order. The state of each volume is taken
		from ``report`` when given and probed otherwise, once per volume;
		a target listed twice is counted but converted only once.
		"""
		summary = RunSummary()
		seen: set[Path] = set()

		for volume in volumes:
			summary.all_mounts += 1

			if volume in seen:
				continue
			seen.add(volume)

			state = report.state(volume) if report is not None else probe_state(volume)
			if state == VolumeState.Converted:
				continue

			self.convert(volume, state)
			summary.changed_mounts += 1

		return summary
