"""Discovery and selection of the serial port a target device is attached to."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from serial.tools import list_ports

from espflash.config import Config, ConfigError, UsbDevice

log = logging.getLogger(__name__)

#: USB UART adapters known to be used on common development boards.
KNOWN_DEVICES = (
    UsbDevice(vid=0x10C4, pid=0xEA60),  # Silicon Labs CP210x UART Bridge
    UsbDevice(vid=0x1A86, pid=0x7523),  # QinHeng Electronics CH340 serial converter
)

_BSD_PLATFORMS = ("freebsd", "dragonfly", "openbsd", "netbsd")
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)
_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"


class SerialNotFoundError(Exception):
    """No serial port of the requested name exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"The serial port '{name}' could not be found")
        self.name = name


class NoSerialError(Exception):
    """No serial ports were detected."""

    def __init__(self) -> None:
        super().__init__("No serial ports could be detected")


class CancelledError(Exception):
    """The user cancelled an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("Operation was cancelled by the user")


class PortType(Enum):
    USB = "usb"
    PCI = "pci"
    BLUETOOTH = "bluetooth"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PortInfo:
    """A detected serial port."""

    port_name: str
    port_type: PortType
    vid: int = 0
    pid: int = 0
    serial_number: str | None = None
    manufacturer: str | None = None
    product: str | None = None


def _classify(info: Any) -> PortInfo:
    vid = getattr(info, "vid", None)
    pid = getattr(info, "pid", None)
    if vid is not None and pid is not None:
        return PortInfo(
            port_name=info.device,
            port_type=PortType.USB,
            vid=vid,
            pid=pid,
            serial_number=getattr(info, "serial_number", None),
            manufacturer=getattr(info, "manufacturer", None),
            product=getattr(info, "product", None),
        )
    hwid = (getattr(info, "hwid", None) or "").upper()
    if "PCI" in hwid:
        port_type = PortType.PCI
    elif "BTHENUM" in hwid or "BLUETOOTH" in hwid:
        port_type = PortType.BLUETOOTH
    else:
        port_type = PortType.UNKNOWN
    return PortInfo(port_name=info.device, port_type=port_type)


def detect_usb_serial_ports(list_all_ports: bool) -> list[PortInfo]:
    """Return available serial ports.

    Only USB ports are returned unless ``list_all_ports`` is set, in which case
    PCI and unknown ports are included too. Bluetooth ports never are.
    """
    allowed = (
        {PortType.USB, PortType.PCI, PortType.UNKNOWN}
        if list_all_ports
        else {PortType.USB}
    )
    ports = (_classify(info) for info in list_ports.comports())
    return [port for port in ports if port.port_type in allowed]


def _detect_or_empty(list_all_ports: bool) -> list[PortInfo]:
    try:
        return detect_usb_serial_ports(list_all_ports)
    except OSError as exc:
        log.debug("Failed to list serial ports: %r", exc)
        return []


def known_ports_filter(port: PortInfo, config: Config | None) -> bool:
    """Whether ``port`` is a configured or commonly used USB device."""
    if port.port_type is not PortType.USB:
        return False
    configured = config.usb_device if config is not None else []
    return any(device.matches(port) for device in (*configured, *KNOWN_DEVICES))


def find_serial_port(ports: Iterable[PortInfo], name: str) -> PortInfo:
    """Find the port called ``name``.

    Outside Windows the name is canonicalised first. Names compare case
    sensitively on the BSDs and ignoring ASCII case elsewhere.
    """
    if sys.platform != "win32":
        name = str(Path(name).resolve(strict=True))

    if sys.platform.startswith(_BSD_PLATFORMS):
        found = next((port for port in ports if port.port_name == name), None)
    else:
        wanted = name.translate(_ASCII_LOWER)
        found = next(
            (port for port in ports if port.port_name.translate(_ASCII_LOWER) == wanted),
            None,
        )

    if found is None:
        raise SerialNotFoundError(name)
    return found


def _ask_yes_no(prompt: str) -> bool | None:
    """Ask a yes/no question; None if the user aborted the prompt."""
    while True:
        try:
            answer = input(f"{prompt} [y/n] ")
        except (EOFError, KeyboardInterrupt):
            return None
        answer = answer.strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False


def _ask_selection(items: list[str], default: int = 0) -> int | None:
    """Let the user pick one of ``items``; None if the prompt was aborted."""
    for number, item in enumerate(items, start=1):
        print(f"  {number}) {item}")
    while True:
        try:
            answer = input(f"Select a port [{default + 1}]: ")
        except (EOFError, KeyboardInterrupt):
            return None
        answer = answer.strip()
        if not answer:
            return default
        if answer.isdigit() and 1 <= int(answer) <= len(items):
            return int(answer) - 1


def confirm_port(port_name: str, product: str | None) -> bool:
    """Ask the user to confirm the use of a serial port."""
    if product is not None:
        prompt = f"Use serial port '{port_name}' - {product}?"
    else:
        prompt = f"Use serial port '{port_name}'?"
    answer = _ask_yes_no(prompt)
    if answer is None:
        raise CancelledError()
    return answer


def _display_name(port: PortInfo, config: Config | None) -> str:
    if known_ports_filter(port, config):
        formatted = f"{_BOLD}{port.port_name}{_RESET}"
    else:
        formatted = port.port_name
    if port.port_type is PortType.USB and port.product is not None:
        return f"{formatted} - {port.product}"
    return formatted


def select_serial_port(
    ports: list[PortInfo], config: Config | None, force_confirm_port: bool
) -> tuple[PortInfo, bool]:
    """Choose a port, asking the user where necessary.

    Returns the port and whether it is a known device.
    """
    known = [port for port in ports if known_ports_filter(port, config)]
    if len(known) == 1 and not force_confirm_port:
        # There is a unique recognised device.
        return known[0], True

    if len(ports) > 1:
        log.info("Detected %d serial ports", len(ports))
        log.info("Ports which match a known common dev board are highlighted")
        log.info("Please select a port")

        ordered = sorted(ports, key=lambda port: not known_ports_filter(port, config))
        names = [_display_name(port, config) for port in ordered]
        index = _ask_selection(names)
        if index is None:
            raise CancelledError()
        chosen = ordered[index]
        return chosen, known_ports_filter(chosen, config)

    if len(ports) == 1:
        # A single port, but not a recognised one.
        port = ports[0]
        product = port.product if port.port_type is PortType.USB else None
        if confirm_port(port.port_name, product):
            return port, False
        raise SerialNotFoundError(port.port_name)

    raise NoSerialError()


def get_serial_port_info(
    port: str | None,
    config: Config,
    list_all_ports: bool = False,
    force_confirm_port: bool = False,
) -> PortInfo:
    """Find the port to use: the given one, the configured one, or one the user picks.

    When the user picks an unrecognised USB device, they are offered to
    remember it in the configuration file.
    """
    if port is not None:
        return find_serial_port(_detect_or_empty(True), port)
    if config.connection.serial is not None:
        return find_serial_port(_detect_or_empty(True), config.connection.serial)

    ports = _detect_or_empty(list_all_ports)
    chosen, matched = select_serial_port(ports, config, force_confirm_port)

    if chosen.port_type is PortType.USB and not matched:
        remember = _ask_yes_no("Remember this serial port for future use?") or False
        if remember:
            device = UsbDevice(vid=chosen.vid, pid=chosen.pid)
            try:
                config.save_with(lambda updated: updated.usb_device.append(device))
            except ConfigError as exc:
                log.error("Failed to save config %s", exc)

    return chosen


def format_port_list(
    ports: Iterable[PortInfo], list_all_ports: bool, name_only: bool
) -> str:
    """Render ports as aligned columns, sorted by name ignoring case."""
    ports = list(ports)
    if not ports:
        if name_only:
            return ""
        return f"No {'' if list_all_ports else 'known '}serial ports found.\n"

    name_width = max(len(port.port_name) for port in ports) + 2
    manufacturer_width = (
        max(
            (
                len(port.manufacturer)
                for port in ports
                if port.port_type is PortType.USB and port.manufacturer is not None
            ),
            default=15,
        )
        + 2
    )

    lines = []
    for port in sorted(ports, key=lambda port: port.port_name.lower()):
        if name_only:
            lines.append(port.port_name)
        elif port.port_type is PortType.USB:
            lines.append(
                f"{port.port_name:<{name_width}}{port.pid:04X}:{port.vid:04X}  "
                f"{port.manufacturer or '':<{manufacturer_width}}{port.product or ''}"
            )
        else:
            label = {
                PortType.BLUETOOTH: "Bluetooth serial port",
                PortType.PCI: "PCI serial port",
                PortType.UNKNOWN: "Unknown type of port",
            }[port.port_type]
            lines.append(f"{port.port_name:<{name_width + 11}}{label}")
    return "".join(f"{line}\n" for line in lines)