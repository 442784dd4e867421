"""RS-232C connection to an Aquos television.

The set expects 9600 baud, 8 data bits, no parity, one stop bit and no
flow control. Replies are single ASCII lines terminated by CR (or LF).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import serial

from ..config import DEFAULT_BAUDRATE, DEFAULT_PORT, DEFAULT_TIMEOUT
from ..exceptions import TransportError, TransportOpenError
from ..protocol.parser import LINE_TERMINATORS

logger = logging.getLogger(__name__)

MAX_RESPONSE_SIZE = 255


@dataclass
class PortInfo:
    """Settings the port was opened with."""

    port: str = DEFAULT_PORT
    baudrate: int = DEFAULT_BAUDRATE


class SerialConnection:
    """Manages the serial link to the television.

    Usage::

        with SerialConnection("/dev/ttyUSB0") as conn:
            conn.write(frame_bytes)
            line = conn.read_line(timeout=1.0)
    """

    def __init__(
        self,
        port: str = DEFAULT_PORT,
        baudrate: int = DEFAULT_BAUDRATE,
        serial_cls: type | None = None,
    ) -> None:
        self._port_info = PortInfo(port=port, baudrate=baudrate)
        self._serial_cls = serial_cls or serial.Serial
        self._serial = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def port_info(self) -> PortInfo:
        return self._port_info

    def open(self) -> PortInfo:
        """Open and configure the serial port.

        Raises:
            TransportOpenError: If the port does not exist or cannot be opened.
        """
        if self._connected:
            return self._port_info

        try:
            self._serial = self._serial_cls(
                port=self._port_info.port,
                baudrate=self._port_info.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
                timeout=DEFAULT_TIMEOUT,
            )
        except (serial.SerialException, OSError) as e:
            raise TransportOpenError(self._port_info.port, str(e)) from e

        self._connected = True
        logger.info(
            "Opened %s at %d baud", self._port_info.port, self._port_info.baudrate
        )
        return self._port_info

    def close(self) -> None:
        """Close the serial port."""
        if not self._connected:
            return

        try:
            self._serial.close()
        except (serial.SerialException, OSError) as e:
            logger.warning("Error closing port: %s", e)
        finally:
            self._serial = None
            self._connected = False
            logger.info("Closed %s", self._port_info.port)

    def write(self, data: bytes) -> int:
        """Write a complete frame and wait for it to leave the buffer.

        Raises:
            ConnectionError: If the port is not open.
            TransportError: If the driver fails the write.
        """
        if not self._connected:
            raise ConnectionError("Serial port is not open")

        try:
            written = self._serial.write(data)
            self._serial.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportError(self._port_info.port, str(e)) from e
        logger.debug("TX %r", data)
        return written

    def read_line(self, timeout: float = DEFAULT_TIMEOUT) -> bytes | None:
        """Read one reply line, including its terminator.

        The deadline covers the whole exchange: bytes that arrive without a
        terminator do not extend it. Terminators received before any
        payload are skipped.

        Args:
            timeout: Seconds to wait for a terminated line.

        Returns:
            The line, the first ``MAX_RESPONSE_SIZE`` bytes if the device
            never terminates a long reply, or ``None`` if the deadline expired.

        Raises:
            ConnectionError: If the port is not open.
            TransportError: If the driver fails the read.
        """
        if not self._connected:
            raise ConnectionError("Serial port is not open")

        deadline = time.monotonic() + timeout
        buffer = bytearray()
        while len(buffer) < MAX_RESPONSE_SIZE:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug("RX timeout after %.2fs, partial=%r", timeout, bytes(buffer))
                return None

            try:
                self._serial.timeout = remaining
                byte = self._serial.read(1)
            except (serial.SerialException, OSError) as e:
                raise TransportError(self._port_info.port, str(e)) from e
            if not byte:
                continue
            if byte in LINE_TERMINATORS:
                if not buffer:
                    continue
                buffer += byte
                logger.debug("RX %r", bytes(buffer))
                return bytes(buffer)
            buffer += byte

        logger.debug("RX buffer full without terminator: %r", bytes(buffer))
        return bytes(buffer)

    def send_and_receive(
        self,
        data: bytes,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> bytes | None:
        """Send a frame and read the reply line.

        Returns:
            The raw reply line, or None if no terminated line arrived in time.
        """
        self.write(data)
        return self.read_line(timeout)

    def __enter__(self) -> SerialConnection:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
