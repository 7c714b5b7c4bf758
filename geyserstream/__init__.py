"""Wire types, framing, filters, configuration and block assembly for geyser update streams."""

__version__ = "0.1.6"