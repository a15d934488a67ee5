"""Screen-driven ambient lighting for WiZ smart bulbs."""

__version__ = "0.1.0"
