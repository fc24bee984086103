"""Code Craft — block-program translation and grid playback engine."""

__version__ = "0.1.0"
