"""FeelEd AI - academic topics as illustrated, narrated stories."""

__version__ = "0.1.0"
