"""
Decoder Models
==============

States of the external decoder lifecycle.

Transitions:
    STARTING → STREAMING → ENDED → STARTING (next playlist item)
    STREAMING → FAILED   (non-zero exit while not stopping)
    any       → STOPPED  (deliberate shutdown; suppresses restart)
"""

from enum import Enum


class DecoderState(str, Enum):
    """Lifecycle state of the active decoder."""
    
    IDLE = "IDLE"
    STARTING = "STARTING"
    STREAMING = "STREAMING"
    ENDED = "ENDED"
    FAILED = "FAILED"
    STOPPED = "STOPPED"
