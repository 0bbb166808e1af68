"""Data models for the BLE data pipe."""

from .config import PipeConfig
from .enums import DeliveryMode, OverflowPolicy, ReassemblyState
from .message import Message

__all__ = [
    "DeliveryMode",
    "Message",
    "OverflowPolicy",
    "PipeConfig",
    "ReassemblyState",
]
