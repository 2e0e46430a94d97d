#!/usr/bin/env python3
"""Logcat Channel Adapter entry point.

    adb logcat --format="monotonic long" | logcat-adapter --output-dir channels/
"""

import argparse
import logging
import signal
import sys
import threading

from logcat_adapter.adapter import LogcatAdapter
from logcat_adapter.assembler import ParsingStateError
from logcat_adapter.config import load_config, load_yaml_config
from logcat_adapter.encoder import IdSpaceExhaustedError
from logcat_adapter.models import Severity
from logcat_adapter.reader import follow_file, read_file, read_stdin

logger = logging.getLogger(__name__)

_stop = threading.Event()


def _signal_handler(sig, frame):
    logger.info("Shutdown signal received, stopping...")
    _stop.set()


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logcat-adapter",
        description="Route logcat records to one output channel per source name.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--input", default=None,
        help="Read a finished logcat capture instead of standard input",
    )
    source.add_argument(
        "--follow", default=None,
        help="Follow a growing logcat capture file until interrupted",
    )
    parser.add_argument(
        "--from-start", action="store_true",
        help="With --follow, process the existing file content first",
    )
    parser.add_argument(
        "--output-dir", default=None,
        help="Directory for channel log files (default: channels/)",
    )
    parser.add_argument(
        "--manifest-file", default=None,
        help="Where to write the identifier -> name manifest (default: channels/manifest.json)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--min-severity", default=None,
        choices=[s.name for s in Severity],
        help="Drop channel messages below this severity (default: VERBOSE)",
    )
    parser.add_argument(
        "--no-echo", dest="echo_input", action="store_const", const=False, default=None,
        help="Do not copy every input line to the self-diagnostic channel",
    )
    parser.add_argument(
        "--stats-json", action="store_true",
        help="Print run statistics as JSON on stdout at exit",
    )
    return parser


def _line_source(args):
    if args.follow:
        return follow_file(args.follow, _stop, from_start=args.from_start)
    if args.input:
        return read_file(args.input)
    return read_stdin()


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [ADAPTER] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    parser = build_cli_parser()
    args = parser.parse_args(argv)

    # stdin and --input end at EOF; only a followed file needs a stop signal
    if args.follow:
        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)

    try:
        config = load_config(args, load_yaml_config(args.config))
    except ValueError as e:
        parser.error(str(e))

    logger.info("Config: app_id=%s, output_dir=%s, min_severity=%s",
                config.app_id, config.output_dir, config.min_severity.name)

    adapter = LogcatAdapter(config)
    exit_code = 0
    with adapter:
        try:
            adapter.run(_line_source(args))
        except (IdSpaceExhaustedError, ParsingStateError) as e:
            logger.critical("Fatal: %s", e)
            exit_code = 1
        except OSError as e:
            logger.error("Cannot read input: %s", e)
            exit_code = 1
        except KeyboardInterrupt:
            pass

    logger.info("Stats: %s", adapter.stats.format_text())
    if args.stats_json:
        print(adapter.stats.format_json())
    return exit_code


if __name__ == "__main__":
    try:
        sys.exit(main())
    except BrokenPipeError:
        sys.exit(0)
