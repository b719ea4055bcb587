#!/usr/bin/env python3
"""
SkiPhone - Trace Replay Runner
==============================
Replays a recorded accelerometer trace through the full dispatcher with a
simulated camera and logs every action the service takes.

Usage:
    python run.py trace.csv
    python run.py trace.csv --photos-dir /tmp/pictures
    python run.py trace.csv --call-state ringing
    python run.py trace.csv --focus-failures 3 --max-focus-attempts 2

Trace format: CSV rows of t_ms,x,y,z[,angle] (see skiphone/sensors/replay.py).

The run:
  1. Loads the trace and builds the pipeline on a manual clock
  2. Enables the service and turns the screen on
  3. Replays the trace at its recorded timestamps
  4. Lets any capture that is still running finish
  5. Prints the dispatched actions and the final status
"""

import sys
import argparse
import logging

from skiphone.camera import CaptureConfig, FocusResult, SimulatedCaptureDevice
from skiphone.coordinator import ManualClock
from skiphone.orchestrator import CallState
from skiphone.pipeline import SkiPhonePipeline
from skiphone.sensors import ShakeConfig, TraceReplaySource
from skiphone.storage import PhotoStore

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

logger = logging.getLogger('skiphone')

# Long enough for countdown + focus settle + a few focus retries
SETTLE_MS = 15000


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='SkiPhone trace replay')
    parser.add_argument('trace', help='CSV trace of t_ms,x,y,z[,angle]')
    parser.add_argument(
        '--photos-dir', default=None,
        help='Directory to write captured photos into (default: discard)'
    )
    parser.add_argument(
        '--call-state', choices=[s.value for s in CallState], default=CallState.IDLE.value,
        help='Telephony state during the replay (default: idle)'
    )
    parser.add_argument(
        '--focus-failures', type=int, default=0,
        help='Number of autofocus failures the simulated camera reports first'
    )
    parser.add_argument(
        '--max-focus-attempts', type=int, default=None,
        help='Cap on autofocus attempts per capture (default: unbounded)'
    )
    parser.add_argument(
        '--sensitive', action='store_true',
        help='Halve the shake thresholds'
    )
    parser.add_argument('--log-file', default=None, help='Also write DEBUG logs to this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='DEBUG logging on the console')
    return parser.parse_args(argv)


def configure_logging(verbose: bool, log_file=None):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT
    )
    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)
        logging.getLogger().setLevel(logging.DEBUG)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose, args.log_file)

    try:
        replay = TraceReplaySource.from_csv(args.trace)
    except (OSError, ValueError) as e:
        logger.error(f"✗ Could not load trace: {e}")
        return 1

    clock = ManualClock()
    device = SimulatedCaptureDevice(focus_results=[FocusResult.FAILURE] * args.focus_failures)
    capture_config = (CaptureConfig.for_bounded_focus(args.max_focus_attempts)
                      if args.max_focus_attempts else CaptureConfig.for_session())
    shake_config = ShakeConfig.for_sensitive() if args.sensitive else ShakeConfig.for_session()
    photo_store = PhotoStore(args.photos_dir) if args.photos_dir else None

    pipeline = SkiPhonePipeline(
        device=device,
        accelerometer_source=replay.accelerometer,
        orientation_source=replay.orientation if replay.has_orientation else None,
        photo_store=photo_store,
        clock=clock,
        shake_config=shake_config,
        capture_config=capture_config,
    )
    device.scheduler = pipeline.scheduler

    with pipeline:
        service = pipeline.service
        service.call_state_changed(CallState(args.call_state))
        service.enable(True)
        service.screen_changed(True)
        pipeline.scheduler.run_pending()

        replay.schedule(pipeline.scheduler)
        pipeline.scheduler.advance(replay.duration_ms + SETTLE_MS)

        status = pipeline.get_status()

    print()
    print("=" * 55)
    print("  SkiPhone replay summary")
    print("=" * 55)
    print(f"  Trace rows          : {len(replay.trace)} ({replay.duration_ms / 1000:.1f}s)")
    print(f"  Gestures detected   : {status['service']['accelerometer']['gestures_detected']}")
    print(f"  Actions dispatched  : {', '.join(a.value for a in pipeline.service.action_log) or 'none'}")
    print(f"  Photos completed    : {status['service']['capture']['completed_sessions']}")
    print(f"  Captures cancelled  : {status['service']['capture']['cancelled_sessions']}")
    if photo_store:
        print(f"  Photos written to   : {photo_store.photo_dir}")
    print()
    return 0


if __name__ == '__main__':
    sys.exit(main())
