"""Replay a recorded tactile log through the merger at a fixed publish rate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

# Ensure local sources are importable without installation
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tactile_merger.config import MergerConfigError, load_merger_profile  # noqa: E402
from tactile_merger.ingestion import ReplayTactileStates, TactileStateAdapter, TimedFeed  # noqa: E402
from tactile_merger.merger import TactileMerger  # noqa: E402
from tactile_merger.runtime import (  # noqa: E402
    ContactPublisher,
    ContactSink,
    CSVContactSink,
    NoOpContactSink,
)
from tactile_merger.utils.logging import configure_logging  # noqa: E402

LOGGER = logging.getLogger("tactile_merger.scripts.run")

DEFAULT_PROFILE_PATH = Path(__file__).with_name("default_profile.yaml")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the replay helper."""
    parser = argparse.ArgumentParser(description="Replay tactile states through the contact merger")
    parser.add_argument("log", type=Path, help="Tactile log (CSV, parquet or feather)")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_PROFILE_PATH,
        help="Path to merger profile YAML",
    )
    parser.add_argument(
        "--frequency",
        type=float,
        default=None,
        help="Override the publish frequency in Hz",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="none",
        help="CSV file receiving contact rows; pass 'none' to disable",
    )
    parser.add_argument(
        "--sensor",
        action="append",
        default=None,
        help="Replay only the named sensor (repeatable)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet-rejections",
        action="store_true",
        help="Only log merger errors, hiding per-update rejection warnings",
    )
    return parser.parse_args(argv)


def _configure_logging(verbose: bool, quiet_rejections: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    configure_logging(level, merger_level=logging.ERROR if quiet_rejections else None)


def _build_sink(raw: str) -> ContactSink:
    value = raw.strip()
    if not value or value.lower() == "none":
        return NoOpContactSink()
    return CSVContactSink(Path(value).expanduser().resolve())


def run_replay(
    *,
    log_path: Path,
    profile_path: Path,
    frequency_hz: float | None,
    sink: ContactSink,
    sensors: Sequence[str] | None = None,
) -> int:
    """Feed the log into a merger and publish snapshots until it is exhausted.

    Returns:
        int: Number of snapshots published.
    """
    profile = load_merger_profile(profile_path)
    merger = TactileMerger(profile.merger)
    replay = ReplayTactileStates(str(log_path), sensors=sensors)
    replay.load()
    messages = list(replay)
    feed = TimedFeed(TactileStateAdapter(merger), messages)
    rate = frequency_hz or profile.publisher.frequency_hz
    publisher = ContactPublisher(merger, sink, frequency_hz=rate)

    LOGGER.info(
        "Replaying %d tactile states from %s (profile=%s)", len(messages), log_path, profile.name
    )
    try:
        for snapshot in publisher.run(feed=feed, time_origin=messages[0].timestamp):
            active = snapshot.active()
            if active:
                LOGGER.debug(
                    "t=%.3f contacts: %s",
                    snapshot.timestamp,
                    ", ".join(contact.name for contact in active),
                )
            if feed.exhausted:
                break
    finally:
        sink.close()

    stats = merger.diagnostics
    if stats.total_rejected:
        LOGGER.warning("%d tactile updates were rejected", stats.total_rejected)
    return publisher.ticks


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the replay CLI."""
    args = parse_args(argv)
    _configure_logging(args.verbose, args.quiet_rejections)

    try:
        ticks = run_replay(
            log_path=args.log.expanduser().resolve(),
            profile_path=args.config.expanduser().resolve(),
            frequency_hz=args.frequency,
            sink=_build_sink(args.output),
            sensors=args.sensor,
        )
    except FileNotFoundError as exc:
        LOGGER.error("File not found: %s", exc)
        return 1
    except MergerConfigError as exc:
        LOGGER.error("Invalid merger configuration: %s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Received keyboard interrupt, stopping replay")
        return 0
    except Exception:
        LOGGER.exception("Replay terminated with an error")
        return 2

    LOGGER.info("Published %d contact snapshots", ticks)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
