"""Serial port selection, SLIP framing, configuration and monitor tooling for ESP32-family devices."""

__version__ = "0.1.0"