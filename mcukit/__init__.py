"""Host-side tools for microcontroller work: firmware images, Modbus RTU,
CRC-16, CAN IDs, GPS, sensor frames, a memory pool and HMAC-SHA1."""

__version__ = "0.1.0"