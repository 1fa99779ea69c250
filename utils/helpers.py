"""
Helper functions shared by the exporter and its command line.
"""

import os


def slice_filename(index):
    """Return the output file name for the 1-based slice ``index``."""
    return f"slice_{index:05d}.tif"


def get_file_size_str(file_path):
    """Get the file size as a human-readable string."""
    if not os.path.exists(file_path):
        return "N/A"

    size_bytes = os.path.getsize(file_path)

    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024 or unit == 'TB':
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024
