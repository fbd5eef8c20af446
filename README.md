# espflash

Helpers for working with ESP32-family development boards over a serial
port. The package finds and selects the serial port, handles the
`espflash.toml` configuration file, frames data with SLIP, parses command-line
argument values, reports progress, and processes the output a device prints
while it is being monitored.

## Installation

```
pip install espflash
```

For running the test suite:

```
pip install "espflash[test]"
pytest
```

## Modules

- `espflash.cli_args`: argument value parsing.
  - `parse_u32(text)` accepts decimal or `0x`/`0X`-prefixed hexadecimal,
    ignores underscores, and raises `ValueError` for anything that is not an
    unsigned 32-bit value.
  - `parse_chip_rev(text)` turns `"major.minor"` into `major * 100 + minor`,
    raising `ChipRevisionError` otherwise.
  - `validate_erase_region(address, size)` returns the pair when both are
    multiples of `FLASH_SECTOR_SIZE` (0x1000) and raises `EraseRegionError`
    when they are not.
- `espflash.slip`: `slip_encode(data)` wraps a packet in END bytes and escapes
  END and ESC. `SlipDecoder.feed(data)` returns the frames completed by a
  chunk of bytes, skipping empty frames and raising `SlipDecodeError` on a bad
  escape; `SlipDecoder.read_frame(stream)` reads from a stream until a frame
  is complete and raises `TimeoutError` when the stream returns nothing.
- `espflash.config`: `Config` holds the baud rate, bootloader and partition
  table paths, partition table offset, preferred serial port
  (`ConnectionSettings`), known USB devices (`UsbDevice`) and flash settings.
  - `Config.get_config_path(cwd)` prefers `espflash.toml` in `cwd`, then in
    its parent, then in the user configuration directory.
  - `Config.load(path)` falls back to defaults when the file cannot be read,
    and raises `ConfigError` when the partition table does not end in `.bin`
    or `.csv`, or the bootloader does not end in `.bin`.
  - `Config.from_toml`, `Config.to_toml` and `Config.save_with(modify)`, which
    writes a modified copy to the file it was loaded from.
  - USB vendor and product ids are stored as hexadecimal strings:
    `parse_hex_u16("a")` is `0x0a`, `format_u16_hex(0x1a86)` is `"1a86"`.
- `espflash.ports`: serial port discovery and selection.
  - `detect_usb_serial_ports(list_all_ports)` lists USB ports, or USB, PCI
    and unknown ports when `list_all_ports` is set.
  - `known_ports_filter(port, config)` recognises configured USB devices and
    the CP210x and CH340 adapters common on development boards.
  - `find_serial_port(ports, name)` raises `SerialNotFoundError` when no port
    has that name.
  - `select_serial_port`, `confirm_port` and `get_serial_port_info` pick a
    port, asking on the terminal when there is no single known one. They raise
    `NoSerialError` when nothing is attached and `CancelledError` when the
    prompt is aborted. `get_serial_port_info` can also remember an unknown USB
    device in the configuration file.
  - `format_port_list(ports, list_all_ports, name_only)` renders a port
    table.
- `espflash.progress`: the `EspflashProgress` progress bar (`init`, `update`,
  `finish`) and `format_image_size(app_size, part_size)`.
- Monitor output:
  - `espflash.line_endings.normalized` turns bare `\n` into `\r\n`.
  - `espflash.parser` provides `Utf8Merger`, which decodes UTF-8 across
    chunk boundaries, `ResolvingPrinter`, which prints lines and resolves
    `0x????????` addresses through a symbol lookup object, and
    `SerialParser`, which passes bytes through unchanged.
  - `espflash.defmt_framing.FrameDelimiter` separates defmt frames
    (`0xFF 0x00 ... 0x00`) from plain text and returns `Frame` objects of kind
    `FrameKind.DEFMT` or `FrameKind.RAW`.
  - `espflash.external_processors.ExternalProcessors` pipes output through a
    comma-separated chain of executables and raises `ExternalProcessorError`
    when one cannot be started.

## Example

```python
from espflash.cli_args import parse_chip_rev, parse_u32
from espflash.config import Config
from espflash.defmt_framing import Frame, FrameDelimiter, FrameKind
from espflash.slip import SlipDecoder, slip_encode

assert parse_u32("0x8000") == 0x8000
assert parse_u32("12_34") == 1234
assert parse_chip_rev("1.2") == 102

packet = slip_encode(b"\xc0payload")
assert SlipDecoder().feed(packet) == [b"\xc0payload"]

config = Config.from_toml('[[usb_device]]\nvid = "1a86"\npid = "7523"\n')
assert config.usb_device[0].vid == 0x1A86

frames = FrameDelimiter().feed(b"\xff\x00frame data\x00hello")
assert frames == [Frame(FrameKind.DEFMT, b"frame data"), Frame(FrameKind.RAW, b"hello")]
```

## What this package does not do

The package has no bootloader command set, no device connection and no reset
handling, so it cannot talk to a chip on its own: it does not sync with,
flash, erase, read or reset a device. It also provides no command-line
program; the argument helpers and port selection are meant to be used from
your own code.