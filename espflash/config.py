"""Loading and saving of the ``espflash.toml`` configuration file."""

from __future__ import annotations

import copy
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

import platformdirs
import tomli_w

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "espflash.toml"

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_U32_MAX = 0xFFFFFFFF


class ConfigError(Exception):
    """The configuration could not be parsed, validated or written."""


class _UsbPort(Protocol):
    vid: int
    pid: int


def parse_hex_u16(text: str) -> int:
    """Parse a hexadecimal string of up to four digits into a 16-bit value.

    Strings of odd length are padded with a leading zero.
    """
    if any(char not in _HEX_DIGITS for char in text):
        raise ConfigError(f"Invalid character in hex string {text!r}")
    if len(text) % 2 == 1:
        text = "0" + text
    raw = bytes.fromhex(text)
    if len(raw) > 2:
        raise ConfigError(f"Hex value {text!r} does not fit in 16 bits")
    return int.from_bytes(raw.rjust(2, b"\x00"), "big")


def format_u16_hex(value: int) -> str:
    """Format a 16-bit value as four lowercase hexadecimal digits."""
    return f"{value:04x}"


@dataclass
class UsbDevice:
    """A configured, known USB device."""

    vid: int
    pid: int

    def matches(self, port: _UsbPort) -> bool:
        """Whether the given USB port belongs to this device."""
        return self.vid == port.vid and self.pid == port.pid


@dataclass
class ConnectionSettings:
    """A configured, known serial connection."""

    serial: str | None = None


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"`{key}` must be a table")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"`{key}` must be a string")
    return value


def _optional_u32(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise ConfigError(f"`{key}` must be an unsigned 32-bit integer")
    return value


def _optional_path(data: dict[str, Any], key: str) -> Path | None:
    value = _optional_str(data, key)
    return Path(value) if value is not None else None


def _usb_device(entry: Any) -> UsbDevice:
    if not isinstance(entry, dict):
        raise ConfigError("`usb_device` entries must be tables")
    values = {}
    for key in ("vid", "pid"):
        raw = entry.get(key)
        if not isinstance(raw, str):
            raise ConfigError(f"`usb_device.{key}` must be a hex string")
        values[key] = parse_hex_u16(raw)
    return UsbDevice(**values)


@dataclass
class Config:
    """Contents of a configuration file."""

    baudrate: int | None = None
    bootloader: Path | None = None
    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    partition_table: Path | None = None
    partition_table_offset: int | None = None
    usb_device: list[UsbDevice] = field(default_factory=list)
    flash: dict[str, Any] = field(default_factory=dict)
    save_path: Path | None = field(default=None, compare=False, repr=False)

    @staticmethod
    def get_config_path(cwd: str | Path | None = None) -> Path:
        """Path of the configuration file to use.

        A file in ``cwd`` wins over one in its parent, which wins over the
        per-user configuration file.
        """
        directory = Path(cwd) if cwd is not None else Path.cwd()
        local = directory / CONFIG_FILE_NAME
        if local.exists():
            return local
        parent = directory.parent
        if parent != directory:
            workspace = parent / CONFIG_FILE_NAME
            if workspace.exists():
                return workspace
        return Path(platformdirs.user_config_dir("espflash", "esp")) / CONFIG_FILE_NAME

    @classmethod
    def from_toml(cls, text: str) -> Config:
        """Parse a configuration from TOML text."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse config: {exc}") from exc

        connection = _table(data, "connection")
        devices = data.get("usb_device", [])
        if not isinstance(devices, list):
            raise ConfigError("`usb_device` must be an array of tables")

        return cls(
            baudrate=_optional_u32(data, "baudrate"),
            bootloader=_optional_path(data, "bootloader"),
            connection=ConnectionSettings(serial=_optional_str(connection, "serial")),
            partition_table=_optional_path(data, "partition_table"),
            partition_table_offset=_optional_u32(data, "partition_table_offset"),
            usb_device=[_usb_device(entry) for entry in devices],
            flash=dict(_table(data, "flash")),
        )

    def to_toml(self) -> str:
        """Serialise the configuration as TOML."""
        document: dict[str, Any] = {}
        if self.baudrate is not None:
            document["baudrate"] = self.baudrate
        if self.bootloader is not None:
            document["bootloader"] = str(self.bootloader)
        connection: dict[str, Any] = {}
        if self.connection.serial is not None:
            connection["serial"] = self.connection.serial
        document["connection"] = connection
        if self.partition_table is not None:
            document["partition_table"] = str(self.partition_table)
        if self.partition_table_offset is not None:
            document["partition_table_offset"] = self.partition_table_offset
        document["usb_device"] = [
            {"vid": format_u16_hex(device.vid), "pid": format_u16_hex(device.pid)}
            for device in self.usb_device
        ]
        document["flash"] = {key: value for key, value in self.flash.items() if value is not None}
        return tomli_w.dumps(document)

    @classmethod
    def load(cls, path: str | Path | None = None) -> Config:
        """Load the configuration file, or defaults if it cannot be read."""
        file = Path(path) if path is not None else cls.get_config_path()
        try:
            text = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            config = cls()
        else:
            config = cls.from_toml(text)

        if config.partition_table is not None and config.partition_table.suffix not in (
            ".bin",
            ".csv",
        ):
            raise ConfigError(
                "Partition table path is invalid: it must have a .bin or .csv extension"
            )
        if config.bootloader is not None and config.bootloader.suffix != ".bin":
            raise ConfigError("Bootloader path is invalid: it must have a .bin extension")

        config.save_path = file
        log.debug("Config: %r", config)
        return config

    def save_with(self, modify: Callable[[Config], None]) -> None:
        """Write a modified copy of this configuration to its save path."""
        if self.save_path is None:
            raise ConfigError("Failed to create config directory: no save path is set")
        updated = copy.deepcopy(self)
        modify(updated)
        serialized = updated.to_toml()
        try:
            self.save_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError("Failed to create config directory") from exc
        try:
            self.save_path.write_text(serialized, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write config to {self.save_path}") from exc