"""Convert mounted volumes to an @ / @snapshots layout before anything else starts."""

import sys
import traceback

from subvols.lib.alarm import BlockingAlarm
from subvols.lib.args import ConfigHandler
from subvols.lib.conversion import Converter
from subvols.lib.exceptions import ConversionBlocked
from subvols.lib.filesystem import Toolset
from subvols.lib.models.volume import RunSummary
from subvols.lib.mounts import enumerate_volumes
from subvols.lib.output import LogContext
from subvols.lib.preflight import Preflight


def run(config: ConfigHandler, context: LogContext, tools: Toolset) -> RunSummary:
	"""
	Preflight every volume, then convert them one by one.
	Raises ConversionBlocked on the first fatal condition.
	"""
	args = config.args

	context.debug(f'Enumerating (via {args.mtab}) all volumes under {args.root}.')
	volumes = enumerate_volumes(args.root, args.mtab)

	report = Preflight(context, tools, args.root, args.mtab).run(volumes)
	context.info(f'{len(report.ready)} volume(s) ready to be converted, {len(report.converted)} already converted.')

	summary = Converter(context, tools, args.mtab).convert_all(volumes, report)
	context.info(str(summary))

	return summary


def main(argv: list[str] | None = None) -> int:
	try:
		config = ConfigHandler(argv)
	except SystemExit as exc:
		# --help and --version end the process normally
		if not exc.code:
			raise
		BlockingAlarm(LogContext()).sound(['Invalid command line arguments. Cannot continue.'])

	context = config.log_context()
	alarm = config.blocking_alarm(context)

	try:
		run(config, context, Toolset(context))
	except ConversionBlocked as blocked:
		alarm.sound(blocked.alerts)
	except Exception as exc:
		# Anything we did not foresee is treated like a structural problem
		context.error(''.join(traceback.format_exception(exc)))
		alarm.sound([f'Unexpected error while converting volumes: {exc}'])

	return 0


if __name__ == '__main__':
	sys.exit(main())
