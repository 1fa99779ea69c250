"""
Zero-copy access to the depth slices of a 16-bit volume.
"""

import numpy as np

from core.errors import BoundsError, VolumeLoadError


class VolumeView:
    """Read-only view of a (depth, height, width) stack of int16 samples.

    The backing buffer is usually a memory map. It is flattened without
    copying and every slice is a view into it, so a VolumeView must not
    outlive the file it was opened from. ``source`` is an optional open
    file handle that is closed together with the view.
    """

    def __init__(self, samples, width, height, depth, source=None):
        if min(width, height, depth) <= 0:
            raise VolumeLoadError(
                f"Volume dimensions must be positive, got {width}x{height}x{depth}"
            )

        samples = np.asarray(samples)
        if samples.dtype.kind != 'i' or samples.dtype.itemsize != 2:
            raise VolumeLoadError(f"Expected 16-bit signed samples, got {samples.dtype}")

        self._samples = samples.reshape(-1)
        self._samples.flags.writeable = False
        self.width = int(width)
        self.height = int(height)
        self.depth = int(depth)
        self._source = source

    @classmethod
    def from_array(cls, array, source=None):
        """Wrap a (depth, height, width) array; a 2D array becomes one frame."""
        array = np.asarray(array)
        if array.ndim == 2:
            array = array.reshape(1, *array.shape)
        if array.ndim != 3:
            raise VolumeLoadError(f"Expected a 3D stack, got shape {array.shape}")
        depth, height, width = array.shape
        return cls(array, width, height, depth, source=source)

    @property
    def samples(self):
        """The flat backing buffer."""
        return self._samples

    @property
    def dtype(self):
        return self._samples.dtype

    def dimensions(self):
        """Return (width, height, depth)."""
        return self.width, self.height, self.depth

    def slice(self, z):
        """Return frame ``z`` as a read-only (height, width) view."""
        if z < 0 or z >= self.depth:
            raise BoundsError(f"Frame index {z} out of range for depth {self.depth}")

        slice_size = self.width * self.height
        begin = z * slice_size
        end = begin + slice_size
        if end > self._samples.size:
            raise BoundsError(
                f"Frame {z} needs samples [{begin}, {end}) but the buffer "
                f"holds only {self._samples.size}"
            )

        return self._samples[begin:end].reshape(self.height, self.width)

    def close(self):
        """Release the file handle backing the samples, if any."""
        if self._source is not None:
            self._source.close()
            self._source = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self):
        return f"VolumeView(width={self.width}, height={self.height}, depth={self.depth}, dtype={self.dtype})"
