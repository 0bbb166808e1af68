"""Data pipe configuration."""

from __future__ import annotations

from dataclasses import dataclass

from ..const import ATT_OVERHEAD, DEFAULT_MTU
from .enums import DeliveryMode, OverflowPolicy


@dataclass(frozen=True, slots=True)
class PipeConfig:
    """Framing and delivery settings shared by the send and receive paths.

    Attributes:
        delivery_mode: Confirmed or unconfirmed frame delivery
        att_overhead: Bytes subtracted from the MTU for each frame
        default_mtu: MTU reported while no peer is connected
        throttle_delay: Seconds between unconfirmed frames of one message
        long_throttle_delay: Delay used once a message exceeds long_message_frames
        long_message_frames: Frame count above which long_throttle_delay applies
        overflow_policy: Handling of bytes received past a message's declared length
    """

    delivery_mode: DeliveryMode = DeliveryMode.UNCONFIRMED
    att_overhead: int = ATT_OVERHEAD
    default_mtu: int = DEFAULT_MTU
    throttle_delay: float = 0.005
    long_throttle_delay: float = 0.010
    long_message_frames: int = 10
    overflow_policy: OverflowPolicy = OverflowPolicy.DISCARD

    def __post_init__(self) -> None:
        if not isinstance(self.delivery_mode, DeliveryMode):
            raise TypeError(
                f"delivery_mode must be DeliveryMode, got {type(self.delivery_mode).__name__}"
            )
        if not isinstance(self.overflow_policy, OverflowPolicy):
            raise TypeError(
                f"overflow_policy must be OverflowPolicy, got {type(self.overflow_policy).__name__}"
            )
        if self.att_overhead < 0:
            raise ValueError(f"att_overhead out of range: {self.att_overhead} (must be >= 0)")
        if self.default_mtu < DEFAULT_MTU:
            raise ValueError(
                f"default_mtu out of range: {self.default_mtu} (must be >= {DEFAULT_MTU})"
            )
        if self.throttle_delay < 0 or self.long_throttle_delay < 0:
            raise ValueError("throttle delays must be >= 0")
        if self.long_message_frames < 1:
            raise ValueError(
                f"long_message_frames out of range: {self.long_message_frames} (must be >= 1)"
            )

    @property
    def confirmed(self) -> bool:
        return self.delivery_mode is DeliveryMode.CONFIRMED

    def throttle_for(self, frames: int) -> float:
        """Delay between frames for a message of this many frames."""
        if frames <= 1 or self.confirmed:
            return 0.0
        if frames > self.long_message_frames:
            return self.long_throttle_delay
        return self.throttle_delay
