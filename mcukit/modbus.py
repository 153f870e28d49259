"""Modbus RTU slave with coils, discrete inputs and register tables."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Iterable, Optional, Union

from mcukit.crc import crc16

BytesLike = Union[bytes, bytearray, memoryview]

BIT_COUNT = 32
HOLDING_COUNT = 100
INPUT_REGISTER_COUNT = 2
MAX_FRAME_BYTES = 100
MAX_COIL_BYTES = 4
MAX_REGISTER_BYTES = 200

COIL_ON = 0xFF00
COIL_OFF = 0x0000

_BIT_MASK = (1 << BIT_COUNT) - 1


class ExceptionCode(IntEnum):
    """Exception codes a slave answers with."""

    ILLEGAL_FUNCTION = 0x01
    ILLEGAL_DATA_ADDRESS = 0x02
    ILLEGAL_DATA_VALUE = 0x03
    SLAVE_DEVICE_BUSY = 0x06


class _Reject(Exception):
    """Internal signal that a request must be answered with an exception."""

    def __init__(self, code: ExceptionCode) -> None:
        super().__init__(code)
        self.code = code


def _with_crc(body: bytes) -> bytes:
    return body + crc16(body).to_bytes(2, "big")


def build_exception(slave_id: int, function: int, code: Union[ExceptionCode, int]) -> bytes:
    """Return an exception response: id, function with its top bit set, code, CRC."""
    for name, value in (("slave_id", slave_id), ("function", function), ("code", int(code))):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"{name} must fit in one byte")
    return _with_crc(bytes([slave_id, function | 0x80, int(code)]))


def _address_and_count(data: bytes) -> tuple[int, int]:
    return int.from_bytes(data[2:4], "big"), int.from_bytes(data[4:6], "big")


def _check_bits(value: int, name: str) -> int:
    if not 0 <= value <= _BIT_MASK:
        raise ValueError(f"{name} must fit in {BIT_COUNT} bits")
    return value


def _register_table(values: Optional[Iterable[int]], size: int, name: str) -> list[int]:
    table = [0] * size if values is None else list(values)
    if len(table) != size:
        raise ValueError(f"{name} must hold exactly {size} registers")
    if any(not 0 <= v <= 0xFFFF for v in table):
        raise ValueError(f"{name} values must fit in 16 bits")
    return table


class ModbusSlave:
    """A Modbus RTU slave answering function codes 01-06, 0F and 10.

    ``coils`` and ``discrete_inputs`` are 32-bit masks, bit n being address n.
    ``holding`` has 100 registers and ``input_registers`` two.
    """

    def __init__(
        self,
        slave_id: int,
        holding: Optional[Iterable[int]] = None,
        coils: int = 0,
        discrete_inputs: int = 0,
        input_registers: Optional[Iterable[int]] = None,
    ) -> None:
        if not 1 <= slave_id <= 0xFF:
            raise ValueError("slave_id must be between 1 and 255")
        self.slave_id = slave_id
        self.holding = _register_table(holding, HOLDING_COUNT, "holding")
        self.coils = _check_bits(coils, "coils")
        self.discrete_inputs = _check_bits(discrete_inputs, "discrete_inputs")
        self.input_registers = _register_table(input_registers, INPUT_REGISTER_COUNT, "input_registers")

        self._handlers: dict[int, Callable[[bytes], Optional[bytes]]] = {
            0x01: lambda data: self._read_bits(data, self.coils),
            0x02: lambda data: self._read_bits(data, self.discrete_inputs),
            0x03: lambda data: self._read_registers(data, self.holding),
            0x04: lambda data: self._read_registers(data, self.input_registers),
            0x05: self._write_single_coil,
            0x06: self._write_single_register,
            0x0F: self._write_multiple_coils,
            0x10: self._write_multiple_registers,
        }

        self._idle = True
        self._collecting = False
        self._have_message = False
        self._buffer = bytearray()

    # -- request handling -------------------------------------------------

    def handle(self, frame: BytesLike) -> Optional[bytes]:
        """Process one complete request frame and return the response.

        Frames for another slave, with a bad CRC, or that are malformed in a
        way the slave ignores yield None.
        """
        data = bytes(frame)
        if len(data) < 4 or data[0] != self.slave_id:
            return None
        if crc16(data[:-2]) != int.from_bytes(data[-2:], "big"):
            return None

        function = data[1]
        handler = self._handlers.get(function)
        if handler is None:
            return build_exception(self.slave_id, function, ExceptionCode.ILLEGAL_FUNCTION)
        try:
            payload = handler(data)
        except _Reject as exc:
            return build_exception(self.slave_id, function, exc.code)
        if payload is None:
            return None
        return _with_crc(bytes([self.slave_id, function]) + payload)

    def _read_bits(self, data: bytes, source: int) -> Optional[bytes]:
        if len(data) != 8:
            return None
        address, count = _address_and_count(data)
        if address >= BIT_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        if count == 0 or address + count > BIT_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_VALUE)
        byte_count = (count + 7) // 8
        value = (source >> address) & ((1 << count) - 1)
        return bytes([byte_count]) + value.to_bytes(byte_count, "little")

    def _read_registers(self, data: bytes, registers: list[int]) -> Optional[bytes]:
        if len(data) != 8:
            return None
        address, count = _address_and_count(data)
        limit = len(registers)
        if address >= limit:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        if count == 0 or address + count > limit:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_VALUE)
        values = registers[address:address + count]
        return bytes([count * 2]) + b"".join(v.to_bytes(2, "big") for v in values)

    def _write_single_coil(self, data: bytes) -> Optional[bytes]:
        if len(data) != 8:
            return None
        address, command = _address_and_count(data)
        if address >= BIT_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        if command == COIL_ON:
            self.coils |= 1 << address
        elif command == COIL_OFF:
            self.coils &= ~(1 << address) & _BIT_MASK
        else:
            return None
        return data[2:6]

    def _write_single_register(self, data: bytes) -> Optional[bytes]:
        if len(data) != 8:
            return None
        address, value = _address_and_count(data)
        if address >= HOLDING_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        self.holding[address] = value
        return data[2:6]

    def _write_multiple_coils(self, data: bytes) -> Optional[bytes]:
        if len(data) < 9:
            return None
        address, count = _address_and_count(data)
        byte_count = data[6]
        if (
            len(data) != 9 + byte_count
            or not 0 < byte_count <= MAX_COIL_BYTES
            or (count + 7) // 8 != byte_count
        ):
            return None
        if address >= BIT_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        if count == 0 or address + count > BIT_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_VALUE)
        mask = (1 << count) - 1
        value = int.from_bytes(data[7:7 + byte_count], "little") & mask
        self.coils = ((self.coils & ~(mask << address)) | (value << address)) & _BIT_MASK
        return data[2:6]

    def _write_multiple_registers(self, data: bytes) -> Optional[bytes]:
        if len(data) < 9:
            return None
        address, count = _address_and_count(data)
        byte_count = data[6]
        if (
            len(data) != 9 + byte_count
            or not 0 < byte_count <= MAX_REGISTER_BYTES
            or byte_count != (count * 2) & 0xFF
        ):
            return None
        if address >= HOLDING_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_ADDRESS)
        if count == 0 or address + count > HOLDING_COUNT:
            raise _Reject(ExceptionCode.ILLEGAL_DATA_VALUE)
        raw = data[7:7 + 2 * count]
        for index, (high, low) in enumerate(zip(raw[0::2], raw[1::2])):
            self.holding[address + index] = (high << 8) | low
        return data[2:6]

    # -- byte-wise reception ----------------------------------------------

    def receive(self, byte: int) -> Optional[bytes]:
        """Take one received byte.

        A frame starts with this slave's id after an idle gap. A frame that
        grows past the buffer is answered at once with a busy exception,
        which is returned; otherwise None.
        """
        if not 0 <= byte <= 0xFF:
            raise ValueError("byte out of range")
        self._have_message = True
        response = None
        if self._idle and byte == self.slave_id:
            self._collecting = True
            self._buffer = bytearray([byte])
        elif not self._idle and self._collecting:
            if len(self._buffer) < MAX_FRAME_BYTES:
                self._buffer.append(byte)
            else:
                function = self._buffer[1]
                self._collecting = False
                self._have_message = False
                self._buffer.clear()
                response = build_exception(self.slave_id, function, ExceptionCode.SLAVE_DEVICE_BUSY)
        self._idle = False
        return response

    def on_timeout(self) -> Optional[bytes]:
        """Signal the inter-frame gap; handle the collected frame, if any."""
        self._idle = True
        self._collecting = False
        frame = bytes(self._buffer)
        self._buffer.clear()
        if self._have_message and len(frame) > 4:
            self._have_message = False
            return self.handle(frame)
        return None