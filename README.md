# mcukit

A small toolbox for the host side of microcontroller projects: firmware
image chores, field-bus framing, sensor data decoding and a few helpers
that are handy to have in Python while testing a device.

No third-party packages are needed.

## What is in it

- **`mcukit.firmware`**: cut the application part out of a raw `.bin`
  image at the first run of 32 `0xFF` bytes (`cut_app`, `find_fill_run`);
  optionally append 32 fill bytes, the option area starting at offset
  `0x11800` and an `OptionParams` trailer (`cut_app_with_options`); and
  drop the last lines of a text file such as an Intel HEX file
  (`strip_hex_tail`, two lines by default). Images over 128 KiB are
  rejected with `ValueError`; an image with no fill run raises
  `NoFillRunError`.
- **`mcukit.crc`**: Modbus CRC-16. `crc16_modbus` returns the standard
  value (sent low byte first); `crc16` returns it byte-swapped, so writing
  it big-endian after the message gives the wire order.
- **`mcukit.modbus`**: `ModbusSlave` answers function codes 01, 02, 03, 04,
  05, 06, 0F and 10 over 32 coils, 32 discrete inputs, 100 holding
  registers and 2 input registers. Bad functions, addresses and quantities
  get exception replies (`ExceptionCode`, `build_exception`); frames for
  another slave, with a bad CRC or of the wrong length are ignored.
  `receive` and `on_timeout` assemble frames byte by byte around the
  inter-frame gap.
- **`mcukit.rs485`**: `SlaveFrameReceiver` collects a sensor's reply one
  byte at a time; `parse_registers` checks its CRC and returns its 16-bit
  registers, raising `FrameError` on a bad frame.
- **`mcukit.can_id`**: `ExtendedId` packs and unpacks the 29-bit ID layout
  (protocol version, profile id, destination and source address,
  transaction sequence, `Fragmentation`, block number, reserved bits).
- **`mcukit.gps`**: `is_rmc` and `parse_rmc` turn an RMC sentence into a
  `GpsFix` (time, status, latitude, longitude and their hemispheres);
  `GpsFix.valid` is true for status `A`. Bad sentences raise `GpsError`.
- **`mcukit.pm25`**: `verify_frame` checks the `BM` header and checksum of
  PMS1003/PMS3003/PMS5003 frames, `parse_frame` decodes them into a
  `PmReading`, and `PmFrameAssembler` gathers bytes and closes a frame
  after an idle timeout counted in `tick` calls.
- **`mcukit.mempool`**: `MemoryPool`, a fixed-block allocator that searches
  from the top of the pool, with `malloc`, `free`, `realloc`, `read`,
  `write` and `usage` (percent of blocks in use). `malloc` raises
  `MemoryError` when no run of free blocks is big enough.
- **`mcukit.sensors`**: raw-value conversions for the RW1820 one-wire
  thermometer (`rw1820_temperature`, in tenths of a degree;
  `assemble_lsb_first`) and the SHT20 (`sht20_temperature`,
  `sht20_humidity`).
- **`mcukit.keymap`**: `KeyReader` detects the first answering `TouchChip`,
  maps its register bits and merges them with mechanical key bits through a
  board map (`map_bits`).
- **`mcukit.tm1650`**: `brightness_byte` and `display_bytes` compute the
  bytes for a two-digit seven-segment display; `TM1650` writes them through
  a `write_register(register, data)` callable you supply.
- **`mcukit.hmac_sha1`**: an incremental `Sha1` and `hmac_sha1_hex`, which
  returns HMAC-SHA1 as 40 upper-case hex digits. Keys longer than 64 bytes
  are rejected with `ValueError`.

## Installing

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Command line

Two commands are installed.

`mcukit-firmware` has three subcommands, each taking an input and an
output path:

```
mcukit-firmware bincut app_full.bin app.bin
mcukit-firmware bincut-options app_full.bin app_opt.bin
mcukit-firmware hexcut boot.hex boot_trimmed.hex
```

`hexcut` prints the input's line count and writes all but its last two
lines.

`mcukit-canid` prints the fields of an extended CAN ID, `0x001000AC` when
none is given:

```
mcukit-canid 0x001000AC
```

## Library use

```python
from mcukit.crc import crc16, crc16_modbus
from mcukit.hmac_sha1 import hmac_sha1_hex
from mcukit.can_id import ExtendedId
from mcukit.gps import parse_rmc

crc = crc16_modbus(bytes([0x01, 0x03, 0x00, 0x00, 0x00, 0x01]))

signature = hmac_sha1_hex(b"message", b"secret")

can_id = ExtendedId.from_int(0x001000AC)
print(can_id.describe())

fix = parse_rmc("$GNRMC,085425.000,A,2239.7941,N,11417.8101,E,1.04,201.28,120619,,,A*74")
print(fix.latitude, fix.north_south, fix.valid)
```

A Modbus slave holds its own tables and answers whole frames:

```python
from mcukit.crc import crc16
from mcukit.modbus import ModbusSlave

slave = ModbusSlave(1)
body = bytes([0x01, 0x03, 0x00, 0x00, 0x00, 0x01])  # read holding register 0
reply = slave.handle(body + crc16(body).to_bytes(2, "big"))
```

A memory pool hands out offsets into its own storage:

```python
from mcukit.mempool import MemoryPool

pool = MemoryPool(40 * 1024, 32)
offset = pool.malloc(100)
pool.write(offset, b"hello")
print(pool.usage())
pool.free(offset)
```

## What it does not do

mcukit works on bytes and values only. It opens no serial port, bus or
device: the Modbus slave, the RS-485 and PM2.5 receivers take bytes you
feed them and return the bytes to send, the TM1650 driver writes through a
function you provide, and the sensor helpers convert readings you have
already taken. It does not flash firmware or talk to a debugger.