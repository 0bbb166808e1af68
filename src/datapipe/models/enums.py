from __future__ import annotations

from enum import IntEnum


class DeliveryMode(IntEnum):
    """How frames are handed to the peer.

    CONFIRMED waits for the peer to acknowledge each frame (indicate, or a
    write with response). UNCONFIRMED does not (notify, or a write without
    response) and is throttled between frames instead.
    """
    UNCONFIRMED = 0
    CONFIRMED = 1


class OverflowPolicy(IntEnum):
    """What the assembler does with bytes left over after a message completes."""
    DISCARD = 0      # Drop surplus bytes (logged)
    CARRY_OVER = 1   # Parse surplus bytes as the start of the next message


class ReassemblyState(IntEnum):
    """Receive-side state machine states."""
    AWAITING_HEADER = 0
    ACCUMULATING_PAYLOAD = 1
