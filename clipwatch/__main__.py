import argparse
import logging
import sys
import typing

import clipwatch.config
import clipwatch.monitor


logger = logging.getLogger(__name__)


def build_config (argv: typing.Optional[typing.List[str]] = None) -> clipwatch.config.MonitorConfig:

	"""
	Read the YAML config file, then apply command-line overrides.
	"""

	parser = argparse.ArgumentParser(prog="clipwatch", description="Mirror a clip-playback device's state")
	parser.add_argument("--config", default="clipwatch.yaml", help="YAML config file (default: clipwatch.yaml)")
	parser.add_argument("--host", help="Device host (overrides the config file)")
	parser.add_argument("--port", type=int, help="Device HTTP port (overrides the config file)")
	parser.add_argument("--interval", type=int, help="Poll interval in ms (overrides the config file)")
	parser.add_argument("--osc", action="store_true", help="Enable the OSC bridge with default ports")
	parser.add_argument("--display", action="store_true", help="Show the terminal status line")
	parser.add_argument("--debug", action="store_true", help="Log at debug level")
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

	config = clipwatch.config.load_config(args.config)

	if args.host is not None:
		config.host = args.host

	if args.port is not None:
		config.port = args.port

	if args.interval is not None:
		config.poll_interval = args.interval

	if args.osc and config.osc is None:
		config.osc = clipwatch.config.OscConfig()

	if args.display:
		config.display = True

	return config


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Main entry point for the clipwatch command.
	"""

	try:
		config = build_config(argv)
		monitor = clipwatch.monitor.Monitor.from_config(config)
	except ValueError as exc:
		logger.error(f"Invalid configuration: {exc}")
		sys.exit(2)

	logger.info(f"clipwatch starting ({config.host}:{config.port})...")

	monitor.run()


if __name__ == "__main__":
	main()
