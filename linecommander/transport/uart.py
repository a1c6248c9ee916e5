# linecommander/transport/uart.py
from __future__ import annotations

from typing import Optional

import serial
from serial import SerialException

from .base import Transport
from .errors import TransportIOError, TransportOpenError


class UARTTransport(Transport):
    """
    UART transport implemented via pyserial.

    read(n, timeout) blocks for the first byte (up to `timeout`), then takes
    whatever else is already waiting in the driver buffer, up to n bytes.
    """

    def __init__(self, port: str, baudrate: int = 115200, timeout: Optional[float] = 2.0):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.ser: Optional[serial.Serial] = None

    def open(self) -> None:
        try:
            self.ser = serial.Serial(
                self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
                write_timeout=self.timeout,
            )
            self.ser.reset_input_buffer()
            self.ser.reset_output_buffer()
        except SerialException as e:
            self.ser = None
            raise TransportOpenError(f"could not open serial port {self.port!r}: {e}") from None

    def close(self) -> None:
        if self.ser is not None:
            try:
                self.ser.close()
            finally:
                self.ser = None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def describe(self) -> str:
        return f"{self.port}@{self.baudrate}"

    def read(self, n: int, timeout: Optional[float] = None) -> bytes:
        ser = self.ser
        if ser is None:
            raise TransportIOError("read while transport not open")

        try:
            wanted = self.timeout if timeout is None else timeout
            # pyserial reconfigures the port on every timeout assignment
            if ser.timeout != wanted:
                ser.timeout = wanted
            buf = ser.read(1)
            if not buf:
                # timeout reached
                return b""
            waiting = min(ser.in_waiting, n - 1)
            if waiting > 0:
                buf += ser.read(waiting)
            return buf
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART read failed: {e}") from None

    def write(self, data: bytes) -> int:
        if self.ser is None:
            raise TransportIOError("write while transport not open")

        try:
            return self.ser.write(data)
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART write failed: {e}") from None

    def flush(self) -> None:
        if self.ser is None:
            raise TransportIOError("flush while transport not open")

        try:
            self.ser.flush()
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART flush failed: {e}") from None
