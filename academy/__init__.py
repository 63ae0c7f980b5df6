"""Academy: data-access core of the online course marketplace."""

__version__ = "0.1.0"
