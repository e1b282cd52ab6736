"""Command line interface for melodyspace.

Usage::

    python -m melodyspace gen tar-gz --notes 60-71 --length 5 --output melodies.tar.gz
    python -m melodyspace gen batch --notes 60-71 --length 5 --partition 2 --partitions 8 --output part-2.tar
    python -m melodyspace estimate tar --notes 60-71 --length 5
    python -m melodyspace partition --notes 60-71 --length 5 --partitions 8

Defaults for compression level, batch size, partition depth, sample size and
log level can be set in a YAML file (``melodyspace.yaml`` by default)::

    gen:
      compression_level: 9
      batch_size: 50000
      partition_depth: 1
    estimate:
      sample_size: 500
    logging:
      level: INFO

Flags given on the command line take precedence over the file.
"""

import argparse
import logging
import os
import sys
import typing

import yaml

import melodyspace.constants
import melodyspace.counting
import melodyspace.errors
import melodyspace.estimate
import melodyspace.generate
import melodyspace.melody
import melodyspace.partition
import melodyspace.storage.backend
import melodyspace.storage.tar_gz


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "melodyspace.yaml"


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		config = yaml.safe_load(f)

	if config is None:
		return {}

	if not isinstance(config, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return config


def _config_value (config: dict, section: str, key: str, default: typing.Any) -> typing.Any:

	"""Return ``config[section][key]`` or ``default``."""

	values = config.get(section) or {}

	return values.get(key, default)


def _resolve (value: typing.Any, config: dict, section: str, key: str, default: typing.Any) -> typing.Any:

	"""A command line value wins over the config file, which wins over the built-in default."""

	if value is not None:
		return value

	return _config_value(config, section, key, default)


def _resolve_int (value: typing.Any, config: dict, section: str, key: str, default: int) -> int:

	"""Like :func:`_resolve`, for options that must be integers (config values may be strings)."""

	resolved = _resolve(value, config, section, key, default)

	if isinstance(resolved, bool):
		raise ValueError(f"{section}.{key} must be an integer, got {resolved!r}")

	try:
		return int(resolved)
	except (TypeError, ValueError) as exc:
		raise ValueError(f"{section}.{key} must be an integer, got {resolved!r}") from exc


def format_bytes (num_bytes: int) -> str:

	"""Format a byte count with a binary unit, e.g. ``7.0 KiB``."""

	size = float(num_bytes)

	for unit in ("B", "KiB", "MiB", "GiB", "TiB", "PiB"):

		if size < 1024 or unit == "PiB":
			return f"{num_bytes} B" if unit == "B" else f"{size:.1f} {unit}"

		size /= 1024

	return f"{num_bytes} B"


def _add_space_arguments (parser: argparse.ArgumentParser) -> None:

	parser.add_argument("--notes", required=True, help="Note pool, e.g. '60-72' or '60,62,64,65,67'")
	parser.add_argument("--length", type=int, required=True, help="Melody length")


def build_parser () -> argparse.ArgumentParser:

	"""
	Build the argument parser for all directives.
	"""

	parser = argparse.ArgumentParser(prog="melodyspace", description="Enumerate every melody of a given length from a pool of notes")
	parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"YAML config file (default: {DEFAULT_CONFIG_PATH})")
	parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

	directives = parser.add_subparsers(dest="directive", required=True)

	gen = directives.add_parser("gen", help="Generate melodies and store them")
	gen.add_argument("kind", choices=[kind.value for kind in melodyspace.storage.backend.StorageKind], help="Storage backend")
	_add_space_arguments(gen)
	gen.add_argument("--output", required=True, help="Output archive path (directory for 'single')")
	gen.add_argument("--start", type=int, default=None, help="First rank to generate (inclusive)")
	gen.add_argument("--end", type=int, default=None, help="Last rank to generate (exclusive)")
	gen.add_argument("--partition", type=int, default=None, help="Partition index to generate (with --partitions)")
	gen.add_argument("--partitions", type=int, default=None, help="Number of partitions the space is split into")
	gen.add_argument("--compression-level", default=None, help="gzip level 0-9 (tar-gz and batch)")
	gen.add_argument("--batch-size", type=int, default=None, help="Melodies per batch (batch)")
	gen.add_argument("--partition-depth", type=int, default=None, help="Hashed directory levels for archive entries")

	estimate = directives.add_parser("estimate", help="Estimate the size of an archive without generating it")
	estimate.add_argument("kind", choices=["tar", "tar-gz", "batch"], help="Storage backend")
	_add_space_arguments(estimate)
	estimate.add_argument("--compression-level", default=None, help="gzip level 0-9 (tar-gz and batch)")
	estimate.add_argument("--batch-size", type=int, default=None, help="Melodies per batch (batch)")
	estimate.add_argument("--sample-size", type=int, default=None, help="Melodies to sample for compressed formats")
	estimate.add_argument("--payload-size", type=int, default=None, help="Fixed payload size in bytes (tar)")

	partition = directives.add_parser("partition", help="Print the rank ranges for a number of partitions")
	_add_space_arguments(partition)
	partition.add_argument("--partitions", type=int, required=True, help="Number of partitions")

	return parser


def _resolve_range (args: argparse.Namespace, num_notes: int, melody_length: int) -> typing.Tuple[int, typing.Optional[int]]:

	"""Return the ``(start, end)`` rank range requested on the command line."""

	if args.partition is None and args.partitions is None:
		start = 0 if args.start is None else args.start
		return start, args.end

	if args.start is not None or args.end is not None:
		raise ValueError("Use either --start/--end or --partition/--partitions, not both")

	if args.partition is None or args.partitions is None:
		raise ValueError("--partition and --partitions must be given together")

	partitions = melodyspace.partition.partition(num_notes, melody_length, args.partitions)

	if args.partition < 0 or args.partition >= len(partitions):
		raise ValueError(f"Partition index must be between 0 and {len(partitions) - 1}")

	selected = partitions[args.partition]

	return selected.start, selected.end


def run_gen (args: argparse.Namespace, config: dict) -> int:

	"""
	Run the ``gen`` directive.
	"""

	pool = melodyspace.melody.parse_note_pool(args.notes)
	kind = melodyspace.storage.backend.StorageKind(args.kind)

	# Surface overflow, range and option errors before any file is created.
	count = melodyspace.counting.count_melodies(len(pool), args.length)
	start, end = melodyspace.generate.resolve_range(count, *_resolve_range(args, len(pool), args.length))

	options: typing.Dict[str, typing.Any] = {}

	if kind != melodyspace.storage.backend.StorageKind.SINGLE:
		options["partition_depth"] = _resolve_int(args.partition_depth, config, "gen", "partition_depth", 0)

	if kind in (melodyspace.storage.backend.StorageKind.TAR_GZ, melodyspace.storage.backend.StorageKind.BATCH):
		level = _resolve(args.compression_level, config, "gen", "compression_level", melodyspace.constants.DEFAULT_COMPRESSION_LEVEL)
		options["compression_level"] = melodyspace.storage.tar_gz.validate_compression_level(level)

	if kind == melodyspace.storage.backend.StorageKind.BATCH:
		options["batch_size"] = _resolve_int(args.batch_size, config, "gen", "batch_size", melodyspace.constants.DEFAULT_BATCH_SIZE)

	backend = melodyspace.storage.backend.open_backend(kind, args.output, **options)

	try:
		# Leaving the block on an error closes the output without sealing it.
		with backend:
			report = melodyspace.generate.write_melodies_to_backend(pool, args.length, backend, start=start, end=end)

	except melodyspace.errors.StorageError as exc:
		# Whatever was written before the failure is left in place for inspection.
		logger.error(f"Failed to write to storage backend ({exc}); {args.output} is incomplete")
		return 1

	print(f"Stored {report.appended} melodies (ranks {report.start} to {report.end}) in {args.output}")

	if report.failed:
		print(f"{report.failed} melodies could not be stored, see the log for details")

	return 0


def run_estimate (args: argparse.Namespace, config: dict) -> int:

	"""
	Run the ``estimate`` directive.
	"""

	pool = melodyspace.melody.parse_note_pool(args.notes)
	kind = melodyspace.storage.backend.StorageKind(args.kind)

	if kind == melodyspace.storage.backend.StorageKind.TAR:
		result = melodyspace.estimate.estimate_tar(pool, args.length, payload_size=args.payload_size)

	else:
		level = _resolve(args.compression_level, config, "gen", "compression_level", melodyspace.constants.DEFAULT_COMPRESSION_LEVEL)
		options: typing.Dict[str, typing.Any] = {
			"compression_level": melodyspace.storage.tar_gz.validate_compression_level(level),
			"sample_size": _resolve_int(args.sample_size, config, "estimate", "sample_size", melodyspace.constants.DEFAULT_SAMPLE_SIZE),
		}

		if kind == melodyspace.storage.backend.StorageKind.BATCH:
			options["batch_size"] = _resolve_int(args.batch_size, config, "gen", "batch_size", melodyspace.constants.DEFAULT_BATCH_SIZE)

		result = melodyspace.estimate.estimate(kind, pool, args.length, **options)

	if result.exact:
		detail = "exact"
	else:
		detail = f"approximate, sampled {result.sample_size} melodies"

	print(f"{kind.value}: {result.num_bytes} bytes ({format_bytes(result.num_bytes)}, {detail}) for {result.count} melodies")

	return 0


def run_partition (args: argparse.Namespace, config: dict) -> int:

	"""
	Run the ``partition`` directive: one ``index start end`` line per partition.
	"""

	pool = melodyspace.melody.parse_note_pool(args.notes)

	for part in melodyspace.partition.partition(len(pool), args.length, args.partitions):
		print(f"{part.index} {part.start} {part.end}")

	return 0


DIRECTIVES: typing.Dict[str, typing.Callable[[argparse.Namespace, dict], int]] = {
	"gen": run_gen,
	"estimate": run_estimate,
	"partition": run_partition,
}


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the melodyspace command line.
	"""

	args = build_parser().parse_args(argv)

	try:
		config = load_config(args.config)
	except (OSError, yaml.YAMLError, ValueError) as exc:
		print(f"Could not read config file {args.config}: {exc}", file=sys.stderr)
		return 1

	level_name = str(_resolve(args.log_level, config, "logging", "level", "INFO")).upper()
	logging.basicConfig(level=getattr(logging, level_name, logging.INFO))

	try:
		return DIRECTIVES[args.directive](args, config)

	except (melodyspace.errors.MelodySpaceError, ValueError) as exc:
		logger.error(f"{args.directive} failed: {exc}")
		return 1


if __name__ == "__main__":
	sys.exit(main())
