"""
Opening volume files as memory-mapped VolumeViews.
"""

import logging
from pathlib import Path

import h5py
import mrcfile
import numpy as np
import tifffile

from core.errors import VolumeLoadError
from core.volume import VolumeView


class VolumeLoader:
    """Class to open the supported volume formats without reading them into memory."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger('mrc2tif')
        self.supported_formats = {
            'mrc': ['.mrc', '.mrcs', '.st', '.rec', '.ali'],
            'tiff': ['.tif', '.tiff'],
            'hdf5': ['.h5', '.hdf5'],
            'npy': ['.npy'],
        }

    def load_file(self, file_path):
        """Open ``file_path`` and return a VolumeView over its samples."""
        file_path = Path(file_path)
        if not file_path.is_file():
            raise VolumeLoadError(f"File not found: {file_path}")

        ext = file_path.suffix.lower()
        self.logger.info(f"Opening volume {file_path}")

        try:
            if ext in self.supported_formats['mrc']:
                data, source = self._load_mrc(file_path)
            elif ext in self.supported_formats['tiff']:
                data, source = self._load_tiff(file_path)
            elif ext in self.supported_formats['hdf5']:
                data, source = self._load_hdf5(file_path)
            elif ext in self.supported_formats['npy']:
                data, source = np.load(file_path, mmap_mode='r'), None
            else:
                raise VolumeLoadError(f"Unsupported file format: {ext}")
        except (OSError, ValueError, KeyError) as e:
            raise VolumeLoadError(f"Error reading {file_path}: {e}") from e

        try:
            volume = VolumeView.from_array(data, source=source)
        except VolumeLoadError:
            if source is not None:
                source.close()
            raise

        self.logger.debug(f"Volume dtype {volume.dtype}, {volume.samples.size} samples")
        return volume

    def _load_mrc(self, file_path):
        """Memory-map an MRC file; the returned handle keeps the map open."""
        mrc = mrcfile.mmap(file_path, mode='r')
        header = mrc.header
        self.logger.debug(
            f"MRC header: nx={int(header.nx)} ny={int(header.ny)} nz={int(header.nz)} mode={int(header.mode)}"
        )
        return mrc.data, mrc

    def _load_tiff(self, file_path):
        """Memory-map an uncompressed TIFF stack, or read it if it cannot be mapped."""
        try:
            return tifffile.memmap(file_path, mode='r'), None
        except ValueError as e:
            self.logger.debug(f"Cannot memory-map {file_path.name} ({e}), reading it instead")
            return tifffile.imread(file_path), None

    def _load_hdf5(self, file_path):
        """Map the 'data' dataset (or the first dataset) of an HDF5 file."""
        with h5py.File(file_path, 'r') as f:
            datasets = [name for name, item in f.items() if isinstance(item, h5py.Dataset)]
            self.logger.debug(f"HDF5 datasets: {datasets}")

            if not datasets:
                raise VolumeLoadError("No datasets found in HDF5 file")

            dataset = f['data' if 'data' in datasets else datasets[0]]

            # Contiguous, unfiltered datasets sit in the file as one raw block
            offset = None
            if dataset.chunks is None and dataset.compression is None:
                offset = dataset.id.get_offset()

            if offset is None:
                self.logger.debug("HDF5 dataset is chunked or compressed, reading it")
                return dataset[()], None

            shape, dtype = dataset.shape, dataset.dtype

        return np.memmap(file_path, mode='r', dtype=dtype, offset=offset, shape=shape), None


def open_volume(file_path, logger=None):
    """Open a volume file with the default loader."""
    return VolumeLoader(logger).load_file(file_path)
