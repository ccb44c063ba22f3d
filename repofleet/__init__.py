"""repofleet — keep a fleet of Go repositories up to date."""

__version__ = "0.1.0"
