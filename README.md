# dnxtool

Tools for working with firmware and OS images used by the Intel DnX
(Download and Execute) recovery protocol on Medfield/Merrifield platforms.

It can:

- read the component versions (IFWI, SCU, hooks/OEM, IA32, Chaabi, mIA)
  stored in the `$FIP` blocks of an IFWI image;
- parse the FUPH (Firmware Update Payload Header) at the end of an IFWI
  image, and build, parse or check the 24-byte DnX header;
- split payloads into the chunks the protocol sends, with progress tracking;
- describe a recovery session through a small set of event types and
  observers that a user interface can subscribe to.

It has no dependencies outside the standard library.

## Installation

```sh
pip install .
```

To run the tests:

```sh
pip install ".[test]"
pytest
```

## Command line

The package installs a `dnx` command with one subcommand, `ifwi-version`.

Print the firmware versions found in an image:

```sh
dnx ifwi-version ifwi.bin
```

```
Image FW versions:
       ifwi: 0094.0171
---- components ----
        scu: ...
  hooks/oem: ...
       ia32: ...
     chaabi: ...
        mIA: ...
```

Use `--json` for a JSON object (keys `ifwi`, `scu`, `hooks_oem`, `ia32`,
`chaabi`, `mia`) or `--markdown` for a Markdown table:

```sh
dnx ifwi-version ifwi.bin --json
dnx ifwi-version ifwi.bin --markdown
```

`-v` / `--verbose` (given before the subcommand) turns on debug logging to
stderr.

If the file does not exist, or no `$FIP` block with an IFWI or SCU version is
found, the command prints `✗ FAILED: <reason>` to stderr and exits with
status 1.

## Library use

Versions from an image:

```python
from pathlib import Path
from dnxtool.ifwi_version import get_image_fw_rev

versions = get_image_fw_rev(Path("ifwi.bin").read_bytes())
print(versions.ifwi)            # e.g. "0094.0171"
print(versions.to_markdown())
print(versions.to_json())
```

When several `$FIP` blocks are present, later ones override earlier ones
except where their fields are zero. `get_image_fw_rev` raises
`FipNotFoundError` (a kind of `IfwiError`) when the image holds no usable
version block. `check_ifwi_file(data)` and `check_ifwi_path(path)` do the
same and also print the versions; `check_ifwi_path` raises `IfwiError` when
the file cannot be read.

DnX and FUPH headers:

```python
from dnxtool.fuph import DnxHeader, FuphHeader

header = DnxHeader.create(109812, 0)
assert header.is_valid()         # checksum == size ^ gp_flags
raw = header.to_bytes()          # 24 bytes, little-endian
assert DnxHeader.parse(raw).size == 109812

fuph = FuphHeader.parse(image_bytes)   # None when no "UPH$" marker is found
if fuph is not None:
    print(fuph.total_size())
    print(fuph)                        # per-component size table
```

`DnxHeader.parse` raises `ValueError` when given fewer than 24 bytes. The
request strings a device sends for each firmware component are listed in the
`FwRequest` enum.

Chunking a payload (128 KiB chunks by default for `ChunkIterator`):

```python
from dnxtool.chunks import ChunkIterator

chunks = ChunkIterator(payload)
print(chunks.total())            # counts a trailing partial chunk
for chunk in chunks:
    send(chunk)
```

`ChunkState(data_size, chunk_size)` and `OsChunkState` keep the position
between calls for a sender driven one acknowledgement at a time:
`next_chunk(data)` returns the next piece or `None`, and `is_done()`,
`progress_pct()` and `reset()` report and rewind. `OsChunkIterator(data,
chunk_size)` walks an OS image and also offers `remaining()` and
`progress_pct()`. A non-positive chunk size raises `ValueError`.

Session events live in `dnxtool.events`: `DeviceConnected`,
`DeviceDisconnected`, `PhaseChanged`, `Progress`, `Log`, `AckReceived`,
`ErrorOccurred`, `Packet` and `Complete`, with the `DnxPhase`, `LogLevel` and
`PacketDirection` enums. Subclass `DnxObserver` and implement `on_event` to
receive them; `NullObserver` discards everything and `LoggingObserver`
forwards events to the standard `logging` module. `dnxtool.cli.CliObserver`
prints them to stderr the way a console front end would.

## What it does not do

dnxtool does not talk to USB devices. There is no transport, no session that
runs the DnX handshake, and no command that downloads firmware or OS images
to a device; the event types and observers are there for such a session to
use, but nothing in the package emits them. It also does not parse the OSIP
header of OS images or split a firmware image into its components: the chunk
helpers work on whatever bytes they are given.