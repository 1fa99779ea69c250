"""
TIFF writers for single int16 slices.

Two strategies are available: ``native`` hands the slice to tifffile and
keeps the host byte order, ``big`` assembles a minimal baseline TIFF by hand
so the file is big-endian on every platform.
"""

import struct
from enum import Enum

import numpy as np
import tifffile

from core.errors import EncodingError, SliceIOError

# TIFF field types
SHORT = 3
LONG = 4
RATIONAL = 5

# Baseline tags, in the ascending order an IFD requires
TAG_IMAGE_WIDTH = 256
TAG_IMAGE_LENGTH = 257
TAG_BITS_PER_SAMPLE = 258
TAG_COMPRESSION = 259
TAG_PHOTOMETRIC = 262
TAG_STRIP_OFFSETS = 273
TAG_SAMPLES_PER_PIXEL = 277
TAG_ROWS_PER_STRIP = 278
TAG_STRIP_BYTE_COUNTS = 279
TAG_X_RESOLUTION = 282
TAG_Y_RESOLUTION = 283
TAG_RESOLUTION_UNIT = 296
TAG_SAMPLE_FORMAT = 339

HEADER_SIZE = 8
IFD_ENTRY_SIZE = 12
RATIONAL_SIZE = 8
MAX_LONG = 0xFFFFFFFF


class Endianness(str, Enum):
    """Byte order of the pixel data in written files."""

    BIG = 'big'
    NATIVE = 'native'


def _as_image(data, width, height):
    """Check the slice against its dimensions and return it as (height, width)."""
    if width <= 0 or height <= 0:
        raise EncodingError(f"Cannot encode an image of {width}x{height} pixels")

    data = np.asarray(data)
    if data.dtype.kind != 'i' or data.dtype.itemsize != 2:
        raise EncodingError(f"Expected int16 samples, got {data.dtype}")
    if data.size != width * height:
        raise EncodingError(
            f"Slice holds {data.size} samples, expected {width}x{height}={width * height}"
        )

    return data.reshape(height, width)


def _create_new(filename):
    """Open ``filename`` for binary writing, failing if it already exists."""
    try:
        return open(filename, 'xb')
    except OSError as exc:
        raise SliceIOError(f"Cannot create {filename}: {exc}") from exc


def write_tiff_native_endian(filename, data, width, height):
    """Write one slice as a single-strip grayscale TIFF in host byte order."""
    image = _as_image(data, width, height).astype('=i2', copy=False)

    with _create_new(filename) as out_file:
        try:
            with tifffile.TiffWriter(out_file, byteorder='=') as tiff:
                tiff.write(
                    image,
                    photometric='minisblack',
                    rowsperstrip=height,
                    metadata=None,
                )
        except OSError as exc:
            raise SliceIOError(f"Error writing {filename}: {exc}") from exc
        except (ValueError, TypeError) as exc:
            raise EncodingError(f"Error encoding {filename}: {exc}") from exc


def build_big_endian_tiff(data, width, height):
    """Return the bytes of a big-endian baseline TIFF holding one int16 slice.

    Layout: header, one IFD at offset 8, the X/Y resolution rationals,
    then the pixel block as a single strip.
    """
    pixels = _as_image(data, width, height).astype('>i2').tobytes()
    if len(pixels) > MAX_LONG or max(width, height) > MAX_LONG:
        raise EncodingError(f"Image of {width}x{height} pixels is too large for a baseline TIFF")

    # Offsets into the data that follows the IFD are filled in below
    entries = [
        (TAG_IMAGE_WIDTH, LONG, width),
        (TAG_IMAGE_LENGTH, LONG, height),
        (TAG_BITS_PER_SAMPLE, SHORT, 16),
        (TAG_COMPRESSION, SHORT, 1),  # none
        (TAG_PHOTOMETRIC, SHORT, 1),  # black is zero
        (TAG_STRIP_OFFSETS, LONG, None),
        (TAG_SAMPLES_PER_PIXEL, SHORT, 1),
        (TAG_ROWS_PER_STRIP, LONG, height),
        (TAG_STRIP_BYTE_COUNTS, LONG, len(pixels)),
        (TAG_X_RESOLUTION, RATIONAL, None),
        (TAG_Y_RESOLUTION, RATIONAL, None),
        (TAG_RESOLUTION_UNIT, SHORT, 1),  # no unit
        (TAG_SAMPLE_FORMAT, SHORT, 2),  # signed integer
    ]

    num_entries = len(entries)
    ifd_offset = HEADER_SIZE
    x_resolution_offset = ifd_offset + 2 + num_entries * IFD_ENTRY_SIZE + 4
    y_resolution_offset = x_resolution_offset + RATIONAL_SIZE
    offsets = {
        TAG_X_RESOLUTION: x_resolution_offset,
        TAG_Y_RESOLUTION: y_resolution_offset,
        TAG_STRIP_OFFSETS: y_resolution_offset + RATIONAL_SIZE,
    }

    parts = [struct.pack('>2sHI', b'MM', 42, ifd_offset), struct.pack('>H', num_entries)]
    for tag, field_type, value in entries:
        if value is None:
            value = offsets[tag]
        if field_type == SHORT:
            # SHORT values are left-justified in the 4-byte value field
            parts.append(struct.pack('>HHIHH', tag, field_type, 1, value, 0))
        else:
            parts.append(struct.pack('>HHII', tag, field_type, 1, value))
    parts.append(struct.pack('>I', 0))  # no next IFD
    parts.append(struct.pack('>II', 1, 1))
    parts.append(struct.pack('>II', 1, 1))
    parts.append(pixels)

    return b''.join(parts)


def write_tiff_big_endian(filename, data, width, height):
    """Write one slice as a hand-built big-endian baseline TIFF."""
    content = build_big_endian_tiff(data, width, height)

    with _create_new(filename) as out_file:
        try:
            out_file.write(content)
        except OSError as exc:
            raise SliceIOError(f"Error writing {filename}: {exc}") from exc


ENCODERS = {
    Endianness.BIG: write_tiff_big_endian,
    Endianness.NATIVE: write_tiff_native_endian,
}


def get_encoder(endianness):
    """Return the writer function for ``endianness`` ('big' or 'native')."""
    try:
        return ENCODERS[Endianness(endianness)]
    except ValueError as exc:
        raise ValueError(
            f"Unknown endianness {endianness!r}, expected one of "
            f"{', '.join(e.value for e in Endianness)}"
        ) from exc
