"""Command-line entry point: anonymize stdin line by line onto stdout.

>>> cat app.log | loganon --config ~/.loganon.toml > app.anon.log

Diagnostics and the optional ``--stats`` report go to stderr.
"""

import argparse
import io
import sys
import tomllib
from pathlib import Path
from typing import TextIO

from pydantic import ValidationError
from pydantic_settings import SettingsError

from loganon.config.settings import Settings, default_config_path
from loganon.engine.engine import Engine, build_engine
from loganon.engine.exceptions import ConstructionError, ProcessingError
from loganon.logging.logger import Log

_GETTING_STARTED = """No config file found at {path}

To get started, copy the example config from the repo:

  cp loganon-example.toml ~/.loganon.toml

Edit ~/.loganon.toml to fit your environment, then run again.
Or specify a config explicitly:

  loganon --config /path/to/your/config.toml
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replace hostnames, IPs, URLs, e-mails and secrets in log lines "
        "with deterministic substitutes."
    )
    parser.add_argument(
        "--config",
        default="",
        help="Path to the TOML config (default: $LOGANON_CONFIG or ~/.loganon.toml).",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print per-rule replacement counts to stderr (overrides engine.stats).",
    )
    return parser


def passthrough_stream(stream: TextIO) -> TextIO:
    """Re-open a std stream as UTF-8 with ``surrogateescape``.

    Bytes that are not valid UTF-8 then survive the round trip unchanged
    instead of aborting the run. Streams without a binary buffer, such as
    ``io.StringIO``, are returned as they are.
    """
    if not isinstance(stream, io.TextIOWrapper):
        return stream
    stream.flush()
    return io.TextIOWrapper(
        stream.buffer, encoding="utf-8", errors="surrogateescape", newline=""
    )


def release_stream(stream: TextIO, original: TextIO) -> None:
    """Flush a stream from :func:`passthrough_stream` without closing the std buffer."""
    if stream is not original and isinstance(stream, io.TextIOWrapper):
        stream.detach()


def run(stream_in: TextIO, stream_out: TextIO, engine: Engine) -> int:
    """Copy *stream_in* to *stream_out* through the engine; returns the line count."""
    processed = 0
    for raw in stream_in:
        line = raw.rstrip("\r\n")
        stream_out.write(engine.apply(line))
        stream_out.write("\n")
        processed += 1
    stream_out.flush()
    return processed


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build engine -> stream -> close."""
    args = build_parser().parse_args(argv)

    config_path = Path(args.config).expanduser() if args.config.strip() else None
    if config_path is None:
        config_path = default_config_path()
        if not config_path.exists():
            sys.stderr.write(_GETTING_STARTED.format(path=config_path))
            return 1

    try:
        settings = Settings.from_toml(config_path)
    except (ValidationError, SettingsError, OSError, tomllib.TOMLDecodeError) as exc:
        sys.stderr.write(f"config error: {exc}\n")
        return 1
    Log.configure(settings.log_level)
    if args.stats:
        settings.engine.stats = True

    try:
        engine = build_engine(settings)
    except ConstructionError as exc:
        sys.stderr.write(f"engine error: {exc}\n")
        return 1

    stream_in = passthrough_stream(sys.stdin)
    stream_out = passthrough_stream(sys.stdout)
    try:
        lines = run(stream_in, stream_out, engine)
        Log.info(f"Processed {lines} lines")
    except ProcessingError as exc:
        sys.stderr.write(f"run error: {exc}\n")
        return 1
    finally:
        release_stream(stream_out, sys.stdout)
        release_stream(stream_in, sys.stdin)
        report = engine.stats_report()
        engine.close()

    if settings.engine.stats:
        for entry in report:
            sys.stderr.write(f"{entry}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
