import argparse
import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from gaze_dwell.configs import AppSettings
from gaze_dwell.core import AsyncioScheduler, PredictorUnavailableError
from gaze_dwell.factories import create_tracker
from gaze_dwell.models import Rect

logger = logging.getLogger("main")


def demo_dwell_ms(settings: AppSettings, requested: Optional[float] = None) -> float:
    """
    Dwell time for the demo regions. Without an explicit value it must fit
    inside one simulated fixation, otherwise no region can ever be selected.
    """
    if requested is not None:
        return requested
    return min(settings.tracker.default_dwell_ms, settings.source.fixation_ms / 2)


async def run(settings: AppSettings, duration_s: float, dwell_ms: float, box_px: float) -> int:
    scheduler = AsyncioScheduler()
    tracker = create_tracker(settings, scheduler)

    try:
        tracker.start()
    except PredictorUnavailableError as e:
        logger.error(f"Gaze tracking unavailable ({e}); nothing to do.")
        return 2

    # One demo region per simulated fixation target
    done = asyncio.Event()
    remaining = set()

    def on_dwell(region_id: str, elapsed_ms: float) -> None:
        logger.info(f"Region '{region_id}' selected after {elapsed_ms:.0f}ms")
        remaining.discard(region_id)
        if not remaining:
            done.set()

    half = box_px / 2
    for i, (x, y) in enumerate(settings.source.targets):
        region_id = f"target-{i}"
        remaining.add(region_id)
        tracker.watch(region_id, Rect(x - half, y - half, x + half, y + half), dwell_ms, on_dwell)

    try:
        await asyncio.wait_for(done.wait(), timeout=duration_s)
        logger.info("All regions selected.")
    except asyncio.TimeoutError:
        logger.info(f"Demo ended after {duration_s:.0f}s, {len(remaining)} region(s) never selected.")
    finally:
        tracker.stop()
    return 0


def main():
    parser = argparse.ArgumentParser(description="Gaze dwell tracker demo on a simulated gaze source")
    parser.add_argument("--duration", type=float, default=30.0, help="Seconds to run before giving up.")
    parser.add_argument("--dwell-ms", type=float, default=None, help="Dwell time per region (default: half a simulated fixation, capped by settings).")
    parser.add_argument("--box", type=float, default=300.0, help="Side of each square demo region, in px.")
    args = parser.parse_args()

    # 1. Load Configuration
    try:
        settings = AppSettings()
    except ValidationError as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    # 2. Setup Logging
    logging.basicConfig(
        level=settings.logging.level,
        format=settings.logging.format,
        stream=sys.stdout
    )
    settings.logging.apply_overrides()
    logger.info(f"Starting Gaze Dwell v{settings.__version__}")

    dwell_ms = demo_dwell_ms(settings, args.dwell_ms)

    # 3. Run the event loop until the demo finishes
    try:
        code = asyncio.run(run(settings, args.duration, dwell_ms, args.box))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        code = 130
    except Exception:
        logger.exception("Fatal Application Error")
        code = 1
    sys.exit(code)

if __name__ == "__main__":
    main()
