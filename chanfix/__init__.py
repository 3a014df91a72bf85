"""ChanFix: IRC service that restores channel operator status."""

__version__ = "1.0.0"
