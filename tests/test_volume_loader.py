import h5py
import mrcfile
import numpy as np
import pytest
import tifffile

from core.errors import VolumeLoadError
from core.volume_loader import VolumeLoader, open_volume


@pytest.fixture
def stack():
    return (np.arange(2 * 3 * 4, dtype=np.int16) - 12).reshape(4, 3, 2)


def assert_matches(volume, stack):
    assert volume.dimensions() == (2, 3, 4)
    for z in range(4):
        assert np.array_equal(volume.slice(z), stack[z])


def test_open_mrc(tmp_path, stack):
    path = tmp_path / 'volume.mrc'
    with mrcfile.new(path) as mrc:
        mrc.set_data(stack)

    with open_volume(path) as volume:
        assert_matches(volume, stack)


def test_open_tiff_stack(tmp_path, stack):
    path = tmp_path / 'volume.tif'
    tifffile.imwrite(path, stack, photometric='minisblack')

    with tifffile.TiffFile(path) as tif:
        assert len(tif.pages) == 4

    with open_volume(path) as volume:
        assert_matches(volume, stack)


def test_open_compressed_tiff_stack(tmp_path, stack):
    path = tmp_path / 'volume.tif'
    tifffile.imwrite(path, stack, photometric='minisblack', compression='zlib')

    with open_volume(path) as volume:
        assert_matches(volume, stack)


def test_open_npy(tmp_path, stack):
    path = tmp_path / 'volume.npy'
    np.save(path, stack)

    with open_volume(path) as volume:
        assert_matches(volume, stack)


def test_open_contiguous_hdf5(tmp_path, stack):
    path = tmp_path / 'volume.h5'
    with h5py.File(path, 'w') as f:
        f.create_dataset('other', data=np.zeros(3, dtype=np.int16))
        f.create_dataset('data', data=stack)

    with open_volume(path) as volume:
        assert_matches(volume, stack)


def test_open_chunked_hdf5(tmp_path, stack):
    path = tmp_path / 'volume.hdf5'
    with h5py.File(path, 'w') as f:
        f.create_dataset('stack', data=stack, chunks=(1, 3, 2), compression='gzip')

    with open_volume(path) as volume:
        assert_matches(volume, stack)


def test_hdf5_without_datasets_is_rejected(tmp_path):
    path = tmp_path / 'empty.h5'
    with h5py.File(path, 'w') as f:
        f.create_group('nothing')

    with pytest.raises(VolumeLoadError):
        open_volume(path)


def test_single_image_is_one_frame(tmp_path):
    path = tmp_path / 'image.npy'
    np.save(path, np.ones((3, 2), dtype=np.int16))

    with open_volume(path) as volume:
        assert volume.dimensions() == (2, 3, 1)


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(VolumeLoadError):
        open_volume(tmp_path / 'missing.mrc')


def test_unsupported_extension_is_rejected(tmp_path):
    path = tmp_path / 'volume.raw'
    path.write_bytes(b'\x00' * 16)
    with pytest.raises(VolumeLoadError):
        open_volume(path)


def test_float_volume_is_rejected(tmp_path):
    path = tmp_path / 'volume.mrc'
    with mrcfile.new(path) as mrc:
        mrc.set_data(np.zeros((2, 2, 2), dtype=np.float32))

    with pytest.raises(VolumeLoadError):
        open_volume(path)


def test_corrupt_file_is_rejected(tmp_path):
    path = tmp_path / 'volume.mrc'
    path.write_bytes(b'not an mrc file')
    with pytest.raises(VolumeLoadError):
        VolumeLoader().load_file(path)
