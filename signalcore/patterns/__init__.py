"""
Multi-phase chart patterns.
"""
from .squeeze import (
    BandObservation,
    IDLE_STATE,
    PatternState,
    Phase,
    SqueezeBreakoutDetector,
    SqueezeParams,
    SqueezeTracker,
    derive_state,
    observe,
    replay,
    squeeze_tracker,
    transition,
)

__all__ = [
    'BandObservation', 'IDLE_STATE', 'PatternState', 'Phase',
    'SqueezeBreakoutDetector', 'SqueezeParams', 'SqueezeTracker',
    'derive_state', 'observe', 'replay', 'squeeze_tracker', 'transition',
]
