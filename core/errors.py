"""
Error types raised while reading volumes and exporting slices.
"""


class SliceExportError(Exception):
    """Base class for runtime errors of the slice exporter."""


class VolumeLoadError(SliceExportError):
    """The volume file could not be opened or does not hold a 16-bit stack."""


class BoundsError(SliceExportError, IndexError):
    """A frame index or computed sample range lies outside the volume."""


class SliceIOError(SliceExportError):
    """An output file already exists or could not be written."""


class EncodingError(SliceExportError):
    """The TIFF writer rejected the image dimensions or sample layout."""


class ChannelError(SliceExportError):
    """A progress message could not be delivered."""


class PreconditionError(AssertionError):
    """The caller violated a contract, e.g. an inverted frame range."""
