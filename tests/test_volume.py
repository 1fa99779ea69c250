import numpy as np
import pytest

from core.errors import BoundsError, VolumeLoadError
from core.volume import VolumeView


def test_dimensions_are_width_height_depth():
    volume = VolumeView.from_array(np.zeros((5, 3, 4), dtype=np.int16))
    assert volume.dimensions() == (4, 3, 5)


def test_every_slice_matches_its_buffer_range(make_volume):
    volume = make_volume(width=3, height=2, depth=4)
    flat = volume.samples
    for z in range(4):
        out = volume.slice(z)
        assert out.shape == (2, 3)
        assert np.array_equal(out.ravel(), flat[z * 6:(z + 1) * 6])


def test_slice_is_a_read_only_view(make_volume):
    volume = make_volume()
    out = volume.slice(1)
    assert np.shares_memory(out, volume.samples)
    assert not out.flags.writeable
    with pytest.raises(ValueError):
        out[0, 0] = 1


@pytest.mark.parametrize("z", [3, 4, 100, -1])
def test_slice_outside_depth_raises_bounds_error(make_volume, z):
    volume = make_volume(depth=3)
    with pytest.raises(BoundsError):
        volume.slice(z)


def test_bounds_error_is_an_index_error(make_volume):
    with pytest.raises(IndexError):
        make_volume(depth=2).slice(2)


def test_misreported_depth_raises_bounds_error():
    samples = np.arange(8, dtype=np.int16)
    volume = VolumeView(samples, width=2, height=2, depth=3)
    assert np.array_equal(volume.slice(1).ravel(), [4, 5, 6, 7])
    with pytest.raises(BoundsError):
        volume.slice(2)


def test_two_dimensional_array_is_a_single_frame():
    image = np.arange(6, dtype=np.int16).reshape(2, 3)
    volume = VolumeView.from_array(image)
    assert volume.dimensions() == (3, 2, 1)
    assert np.array_equal(volume.slice(0), image)


def test_big_endian_buffer_is_accepted():
    data = np.arange(8, dtype='>i2').reshape(2, 2, 2)
    volume = VolumeView.from_array(data)
    assert np.array_equal(volume.slice(1).ravel(), [4, 5, 6, 7])


@pytest.mark.parametrize("dtype", [np.uint16, np.float32, np.int32, np.int8])
def test_non_int16_samples_are_rejected(dtype):
    with pytest.raises(VolumeLoadError):
        VolumeView.from_array(np.zeros((2, 2, 2), dtype=dtype))


def test_zero_dimension_is_rejected():
    with pytest.raises(VolumeLoadError):
        VolumeView(np.zeros(0, dtype=np.int16), width=0, height=2, depth=2)


def test_four_dimensional_array_is_rejected():
    with pytest.raises(VolumeLoadError):
        VolumeView.from_array(np.zeros((2, 2, 2, 2), dtype=np.int16))


def test_close_releases_source():
    class Source:
        closed = False

        def close(self):
            self.closed = True

    source = Source()
    with VolumeView.from_array(np.zeros((1, 2, 2), dtype=np.int16), source=source):
        assert not source.closed
    assert source.closed
