"""BLE Data Pipe Package.

  Typed JSON and binary messages of any size over a single BLE GATT
  characteristic.
  """

from .const import CHAR_UUID, JSON_TYPE, SERVICE_UUID
from .exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    DataPipeError,
    DecodeError,
    FrameTooSmallError,
    NotConnectedError,
    ProtocolError,
    TransmitAbortedError,
)
from .framer import MessageFramer
from .models import DeliveryMode, Message, OverflowPolicy, PipeConfig, ReassemblyState
from .pipe import DataPipe
from .protocol import MessageAssembler, MessageDispatcher
from .transport import BLEConnection, PipeCallbacks, PipeLink, PipeTransport

__version__ = "0.1.0"

__all__ = [
    # Main API
    "DataPipe",
    # Building blocks
    "MessageFramer",
    "MessageAssembler",
    "MessageDispatcher",
    "BLEConnection",
    "PipeTransport",
    "PipeLink",
    "PipeCallbacks",
    # Exceptions
    "DataPipeError",
    "BLEConnectionError",
    "BLETimeoutError",
    "ProtocolError",
    "NotConnectedError",
    "FrameTooSmallError",
    "TransmitAbortedError",
    "DecodeError",
    # Models
    "Message",
    "PipeConfig",
    "DeliveryMode",
    "OverflowPolicy",
    "ReassemblyState",
    # Constants
    "JSON_TYPE",
    "SERVICE_UUID",
    "CHAR_UUID",
]
