"""
Core functionality of the volume slice exporter.

This package contains modules for opening volumes, addressing their slices,
writing TIFF files and running the parallel export.
"""

__all__ = ['errors', 'volume', 'volume_loader', 'tiff_writer', 'progress', 'export_pipeline']
