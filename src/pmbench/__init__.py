"""pmbench: time package-manager operations and chart the results."""

__version__ = "0.1.0"
