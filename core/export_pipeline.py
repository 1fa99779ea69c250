"""
Parallel export of volume slices to one TIFF file per frame.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm

from core.errors import ChannelError, PreconditionError
from core.progress import Done, Error, InProgress, ProgressChannel
from core.tiff_writer import Endianness, get_encoder
from core.volume_loader import open_volume
from utils.helpers import get_file_size_str, slice_filename

logger = logging.getLogger('mrc2tif')


def resolve_frame_range(depth, start_at_frame=1, stop_at_frame=None):
    """Convert 1-indexed, inclusive frame numbers to a half-open index range."""
    start = start_at_frame - 1
    stop = depth if stop_at_frame is None else stop_at_frame
    return start, stop


def _notify(progress_sink, message):
    """Send ``message`` if a sink is attached; delivery failures never fail the export."""
    if progress_sink is None:
        return
    try:
        progress_sink.send(message)
    except ChannelError as e:
        if not isinstance(message, InProgress):
            logger.warning(f"Progress observer missed {type(message).__name__}: {e}")


def export(volume, destination, endianness=Endianness.BIG, start=0, stop=None,
           progress_sink=None, max_workers=None, show_progress=False):
    """Write frames ``[start, stop)`` of ``volume`` to ``destination``.

    Files are named ``slice_00001.tif`` onwards, counted from ``start``.
    Frames are encoded on a thread pool; the first frame error observed is
    raised after queued frames are cancelled and running ones finish.
    Files written before the error stay on disk.

    Returns the number of files written.
    """
    width, height, depth = volume.dimensions()
    if stop is None:
        stop = depth
    if not 0 <= start <= stop <= depth:
        raise PreconditionError(f"Invalid frame range [{start}, {stop}) for depth {depth}")

    encoder = get_encoder(endianness)
    destination = Path(destination)
    total = stop - start

    def export_frame(z):
        out_path = destination / slice_filename(z - start + 1)
        encoder(out_path, volume.slice(z), width, height)
        logger.debug(f"created {out_path}")

    logger.info(f"Exporting frames {start + 1}-{stop} ({total} files) to {destination}")

    # Completions are consumed on this thread only, so ``done`` needs no lock
    done = 0
    progress_bar = tqdm(total=total, desc="Exporting", unit="slice", disable=not show_progress)
    try:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(export_frame, z) for z in range(start, stop)]
            try:
                for future in as_completed(futures):
                    future.result()
                    done += 1
                    progress_bar.update(1)
                    _notify(progress_sink, InProgress(done, total))
            except BaseException:
                for pending in futures:
                    pending.cancel()
                raise
    except Exception as e:
        logger.debug(f"Export aborted after {done} of {total} frames")
        _notify(progress_sink, Error(str(e)))
        raise
    finally:
        progress_bar.close()

    _notify(progress_sink, Done(total))
    return total


def export_frames(volume, destination, endianness=Endianness.BIG, start_at_frame=1,
                  stop_at_frame=None, **kwargs):
    """Export an inclusive, 1-indexed frame range (``stop_at_frame`` defaults to the last frame)."""
    start, stop = resolve_frame_range(volume.depth, start_at_frame, stop_at_frame)
    return export(volume, destination, endianness, start, stop, **kwargs)


def convert(volume_path, destination, endianness=Endianness.BIG, start_at_frame=1,
            stop_at_frame=None, **kwargs):
    """Open ``volume_path`` and export the selected frames as TIFF files."""
    t0 = time.perf_counter()

    with open_volume(volume_path) as volume:
        width, height, depth = volume.dimensions()
        logger.info(f"Input: {volume_path} ({get_file_size_str(volume_path)})")
        logger.info(f"dimensions: {depth}x{height}x{width}")
        logger.info(f"endianness: {Endianness(endianness).value}")

        count = export_frames(volume, destination, endianness, start_at_frame,
                              stop_at_frame, **kwargs)

    logger.info(f"conversion done in {time.perf_counter() - t0:.2f} s")
    return count


class ExportWorker(threading.Thread):
    """Run convert() in the background, reporting through a ProgressChannel.

    An observer polls ``channel`` between redraws. Errors raised before any
    frame work (unreadable file, bad range) are posted as an Error message
    here so the observer always sees a terminal message.
    """

    def __init__(self, volume_path, destination, channel=None, **options):
        super().__init__(name='mrc2tif-export', daemon=True)
        self.volume_path = volume_path
        self.destination = destination
        self.channel = channel if channel is not None else ProgressChannel()
        self.options = options
        self.result = None
        self.error = None

    def run(self):
        try:
            self.result = convert(self.volume_path, self.destination,
                                  progress_sink=self.channel, **self.options)
        except Exception as e:
            self.error = e
            logger.error(f"Error while converting: {e}")
            if not self.channel.terminated:
                _notify(self.channel, Error(str(e)))
