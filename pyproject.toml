[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcukit"
version = "0.1.0"
description = "Host-side tools for microcontroller work: firmware image cutting, Modbus RTU, CRC-16, CAN IDs, sensor frames and more"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "embedded",
    "firmware",
    "modbus",
    "crc16",
    "can",
    "nmea",
    "hmac-sha1",
    "sensors",
    "microcontroller",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mcukit-firmware = "mcukit.firmware:main"
mcukit-canid = "mcukit.can_id:main"

[tool.hatch.build.targets.wheel]
packages = ["mcukit"]

[tool.hatch.build.targets.sdist]
include = ["mcukit", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
