from typing import List, Optional

from .acquisition import DummySource, NullSource, SampleSource
from .configs import AppSettings
from .core import GazeDwellTracker, Scheduler
from .sinks import GazeEventSink, LoggingSink, ZMQSink

def create_source(settings: AppSettings, scheduler: Scheduler) -> SampleSource:
    """
    Returns the simulated predictor when enabled, otherwise a NullSource so
    that starting the tracker reports the predictor as unavailable.
    """
    cfg = settings.source
    if not cfg.enabled:
        return NullSource("Simulated source disabled and no predictor supplied.")

    return DummySource(
        clock=scheduler.now,
        targets=cfg.targets,
        fixation_ms=cfg.fixation_ms,
        saccade_ms=cfg.saccade_ms,
        noise_px=cfg.noise_px,
        dropout_rate=cfg.dropout_rate,
        seed=cfg.seed,
    )

def create_sinks(settings: AppSettings) -> List[GazeEventSink]:
    """
    Creates fresh sink instances for a new tracker.
    """
    sinks: List[GazeEventSink] = [LoggingSink()]

    # ZMQ
    if settings.zmq.enabled:
        sinks.append(ZMQSink(host=settings.zmq.host, send_hwm=settings.zmq.send_hwm))

    return sinks

def create_tracker(
    settings: AppSettings,
    scheduler: Scheduler,
    source: Optional[SampleSource] = None,
) -> GazeDwellTracker:
    """Builds a tracker from settings. A given `source` replaces the configured one."""
    return GazeDwellTracker(
        source=source if source is not None else create_source(settings, scheduler),
        scheduler=scheduler,
        settings=settings.tracker,
        sinks=create_sinks(settings),
    )
