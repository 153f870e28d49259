import pytest

from mcukit.crc import crc16
from mcukit.modbus import ExceptionCode, ModbusSlave, build_exception


def frame(*values):
    body = bytes(values)
    return body + crc16(body).to_bytes(2, "big")


def crc_ok(response):
    return crc16(response[:-2]) == int.from_bytes(response[-2:], "big")


def test_read_single_holding_register_known_frame():
    slave = ModbusSlave(1, holding=[0x1234] + [0] * 99)
    response = slave.handle(bytes.fromhex("010300000001840A"))
    assert response[:-2] == bytes([1, 3, 2, 0x12, 0x34])
    assert crc_ok(response)


def test_read_ten_holding_registers_known_frame():
    values = list(range(100))
    slave = ModbusSlave(1, holding=values)
    response = slave.handle(bytes.fromhex("01030000000AC5CD"))
    assert response[2] == 20
    payload = response[3:-2]
    assert [int.from_bytes(payload[i:i + 2], "big") for i in range(0, 20, 2)] == values[:10]
    assert crc_ok(response)


def test_preset_single_register_echoes_and_reads_back():
    slave = ModbusSlave(7)
    request = frame(7, 0x06, 0x00, 0x05, 0xAB, 0xCD)
    assert slave.handle(request) == request
    assert slave.holding[5] == 0xABCD
    response = slave.handle(frame(7, 0x03, 0x00, 0x05, 0x00, 0x01))
    assert response[3:5] == bytes([0xAB, 0xCD])


def test_preset_multiple_registers_round_trip():
    slave = ModbusSlave(2)
    request = frame(2, 0x10, 0x00, 0x0A, 0x00, 0x02, 0x04, 0x11, 0x22, 0x33, 0x44)
    response = slave.handle(request)
    assert response == frame(2, 0x10, 0x00, 0x0A, 0x00, 0x02)
    assert slave.holding[10:12] == [0x1122, 0x3344]


def test_preset_multiple_registers_byte_count_mismatch_ignored():
    slave = ModbusSlave(2)
    request = frame(2, 0x10, 0x00, 0x00, 0x00, 0x02, 0x02, 0x11, 0x22)
    assert slave.handle(request) is None
    assert slave.holding[0] == 0


def test_force_single_coil_on_and_off():
    slave = ModbusSlave(1)
    on = frame(1, 0x05, 0x00, 0x03, 0xFF, 0x00)
    assert slave.handle(on) == on
    assert slave.coils == 1 << 3
    off = frame(1, 0x05, 0x00, 0x03, 0x00, 0x00)
    assert slave.handle(off) == off
    assert slave.coils == 0


def test_force_single_coil_bad_command_ignored():
    slave = ModbusSlave(1, coils=0x5)
    assert slave.handle(frame(1, 0x05, 0x00, 0x01, 0x12, 0x34)) is None
    assert slave.coils == 0x5


def test_read_coils_from_offset():
    coils = 0b1011 << 4
    slave = ModbusSlave(1, coils=coils)
    response = slave.handle(frame(1, 0x01, 0x00, 0x04, 0x00, 0x04))
    assert response[:-2] == bytes([1, 0x01, 1, coils >> 4])


def test_read_coils_spanning_two_bytes():
    slave = ModbusSlave(1, coils=0xFFFFFFFF)
    response = slave.handle(frame(1, 0x01, 0x00, 0x00, 0x00, 0x0A))
    assert response[2] == 2
    assert int.from_bytes(response[3:5], "little") == (1 << 10) - 1


def test_read_discrete_inputs():
    inputs = 0x80000001
    slave = ModbusSlave(1, discrete_inputs=inputs)
    response = slave.handle(frame(1, 0x02, 0x00, 0x00, 0x00, 0x20))
    assert response[2] == 4
    assert int.from_bytes(response[3:7], "little") == inputs


def test_force_multiple_coils_then_read_back():
    slave = ModbusSlave(1, coils=0xFFFF0000)
    request = frame(1, 0x0F, 0x00, 0x02, 0x00, 0x03, 0x01, 0b101)
    assert slave.handle(request) == frame(1, 0x0F, 0x00, 0x02, 0x00, 0x03)
    assert slave.coils == 0xFFFF0000 | (0b101 << 2)
    response = slave.handle(frame(1, 0x01, 0x00, 0x02, 0x00, 0x03))
    assert response[3] == 0b101


def test_read_input_registers():
    slave = ModbusSlave(1, input_registers=[0x0102, 0x0304])
    response = slave.handle(frame(1, 0x04, 0x00, 0x00, 0x00, 0x02))
    assert response[:-2] == bytes([1, 0x04, 4, 0x01, 0x02, 0x03, 0x04])
    assert slave.handle(frame(1, 0x04, 0x00, 0x01, 0x00, 0x02)) == build_exception(
        1, 0x04, ExceptionCode.ILLEGAL_DATA_VALUE
    )


def test_illegal_function():
    slave = ModbusSlave(1)
    response = slave.handle(frame(1, 0x07, 0x00, 0x00, 0x00, 0x01))
    assert response == build_exception(1, 0x07, ExceptionCode.ILLEGAL_FUNCTION)
    assert response[1] == 0x87


@pytest.mark.parametrize(
    "request_bytes, code",
    [
        ((0x03, 0x00, 0x64, 0x00, 0x01), ExceptionCode.ILLEGAL_DATA_ADDRESS),
        ((0x03, 0x00, 0x63, 0x00, 0x02), ExceptionCode.ILLEGAL_DATA_VALUE),
        ((0x03, 0x00, 0x00, 0x00, 0x00), ExceptionCode.ILLEGAL_DATA_VALUE),
        ((0x01, 0x00, 0x20, 0x00, 0x01), ExceptionCode.ILLEGAL_DATA_ADDRESS),
        ((0x02, 0x00, 0x1F, 0x00, 0x02), ExceptionCode.ILLEGAL_DATA_VALUE),
        ((0x05, 0x00, 0x20, 0xFF, 0x00), ExceptionCode.ILLEGAL_DATA_ADDRESS),
        ((0x06, 0x00, 0x64, 0x00, 0x01), ExceptionCode.ILLEGAL_DATA_ADDRESS),
    ],
)
def test_exception_responses(request_bytes, code):
    slave = ModbusSlave(3)
    response = slave.handle(frame(3, *request_bytes))
    assert response == build_exception(3, request_bytes[0], code)


def test_build_exception_layout():
    response = build_exception(9, 0x03, ExceptionCode.SLAVE_DEVICE_BUSY)
    assert response[:3] == bytes([9, 0x83, 0x06])
    assert len(response) == 5
    assert crc_ok(response)


def test_build_exception_rejects_out_of_range():
    with pytest.raises(ValueError):
        build_exception(256, 0x03, 1)


def test_bad_crc_ignored():
    slave = ModbusSlave(1)
    request = bytearray(frame(1, 0x06, 0x00, 0x00, 0x00, 0x01))
    request[-1] ^= 0xFF
    assert slave.handle(bytes(request)) is None
    assert slave.holding[0] == 0


def test_other_slave_ignored():
    slave = ModbusSlave(1)
    assert slave.handle(frame(2, 0x06, 0x00, 0x00, 0x00, 0x01)) is None
    assert slave.holding[0] == 0


def test_wrong_length_read_ignored():
    slave = ModbusSlave(1)
    assert slave.handle(frame(1, 0x03, 0x00, 0x00, 0x00, 0x01, 0x00)) is None


def test_receive_bytes_then_timeout_handles_frame():
    slave = ModbusSlave(1, holding=[0x1234] + [0] * 99)
    request = bytes.fromhex("010300000001840A")
    assert [slave.receive(b) for b in request] == [None] * len(request)
    response = slave.on_timeout()
    assert response == ModbusSlave(1, holding=[0x1234] + [0] * 99).handle(request)


def test_frame_not_started_mid_stream():
    slave = ModbusSlave(1)
    for b in bytes([0x07]) + frame(1, 0x06, 0x00, 0x00, 0x00, 0x01):
        slave.receive(b)
    assert slave.on_timeout() is None
    assert slave.holding[0] == 0


def test_two_frames_separated_by_timeouts():
    slave = ModbusSlave(1)
    first = frame(1, 0x06, 0x00, 0x01, 0x00, 0x02)
    second = frame(1, 0x06, 0x00, 0x02, 0x00, 0x03)
    for request in (first, second):
        for b in request:
            slave.receive(b)
        assert slave.on_timeout() == request
    assert slave.holding[1:3] == [2, 3]


def test_overflow_answers_busy():
    slave = ModbusSlave(1)
    assert slave.receive(1) is None
    assert slave.receive(0x03) is None
    assert all(slave.receive(0) is None for _ in range(98))
    assert slave.receive(0) == build_exception(1, 0x03, ExceptionCode.SLAVE_DEVICE_BUSY)
    assert slave.on_timeout() is None


def test_receive_rejects_out_of_range_byte():
    with pytest.raises(ValueError):
        ModbusSlave(1).receive(256)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"slave_id": 0},
        {"slave_id": 256},
        {"slave_id": 1, "holding": [0] * 99},
        {"slave_id": 1, "holding": [0x10000] + [0] * 99},
        {"slave_id": 1, "coils": 1 << 32},
        {"slave_id": 1, "input_registers": [0]},
    ],
)
def test_invalid_construction(kwargs):
    with pytest.raises(ValueError):
        ModbusSlave(**kwargs)