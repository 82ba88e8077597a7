"""Events emitted during a DnX session and observers that receive them."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class LogLevel(Enum):
    """Severity of a log event."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS = {
    LogLevel.TRACE: TRACE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class DnxPhase(Enum):
    """Phases of the DnX state machine."""

    WAITING_FOR_DEVICE = "Waiting for Device"
    HANDSHAKE = "Handshake"
    FIRMWARE_DOWNLOAD = "Firmware Download"
    OS_DOWNLOAD = "OS Download"
    DEVICE_RESET = "Device Reset"
    COMPLETE = "Complete"
    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


class PacketDirection(Enum):
    """Direction of a USB packet relative to the host."""

    TX = "TX"
    RX = "RX"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DeviceConnected:
    vid: int
    pid: int


@dataclass(frozen=True)
class DeviceDisconnected:
    pass


@dataclass(frozen=True)
class PhaseChanged:
    from_phase: DnxPhase
    to_phase: DnxPhase


@dataclass(frozen=True)
class Progress:
    phase: DnxPhase
    operation: str
    current: int
    total: int

    def percent(self) -> int:
        """Completion percentage, 0 when the total is unknown."""
        if self.total > 0:
            return (self.current * 100) // self.total
        return 0


@dataclass(frozen=True)
class Log:
    level: LogLevel
    message: str


@dataclass(frozen=True)
class AckReceived:
    ack: str


@dataclass(frozen=True)
class ErrorOccurred:
    code: int
    message: str


@dataclass(frozen=True)
class Packet:
    direction: PacketDirection
    packet_type: str
    length: int
    data: Optional[bytes] = None


@dataclass(frozen=True)
class Complete:
    pass


DnxEvent = Union[
    DeviceConnected,
    DeviceDisconnected,
    PhaseChanged,
    Progress,
    Log,
    AckReceived,
    ErrorOccurred,
    Packet,
    Complete,
]


class DnxObserver(ABC):
    """Receives events from a DnX session."""

    @abstractmethod
    def on_event(self, event: DnxEvent) -> None:
        """Handle one event."""


class NullObserver(DnxObserver):
    """Discards every event."""

    def on_event(self, event: DnxEvent) -> None:
        return None


class LoggingObserver(DnxObserver):
    """Writes events to a standard-library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def on_event(self, event: DnxEvent) -> None:
        log = self.logger.log
        match event:
            case DeviceConnected(vid=vid, pid=pid):
                log(logging.INFO, "Device connected vid=%04X pid=%04X", vid, pid)
            case DeviceDisconnected():
                log(logging.WARNING, "Device disconnected")
            case PhaseChanged(from_phase=src, to_phase=dst):
                log(logging.INFO, "Phase changed from=%s to=%s", src, dst)
            case Progress():
                log(
                    logging.DEBUG,
                    "Progress phase=%s operation=%s progress=%d%%",
                    event.phase,
                    event.operation,
                    event.percent(),
                )
            case Log(level=level, message=message):
                log(level.logging_level, "%s", message)
            case AckReceived(ack=ack):
                log(logging.DEBUG, "ACK received ack=%s", ack)
            case ErrorOccurred(code=code, message=message):
                log(logging.ERROR, "Error: %s (code=%d)", message, code)
            case Packet(direction=direction, packet_type=packet_type, length=length):
                log(
                    TRACE,
                    "USB Packet dir=%s type=%s len=%d",
                    direction,
                    packet_type,
                    length,
                )
            case Complete():
                log(logging.INFO, "Operation complete")