"""
Utility functions for the volume slice exporter.

This package contains helper modules for logging, configuration, and other
general purpose functionality used across the application.
"""

__all__ = ['logger', 'config', 'helpers']
