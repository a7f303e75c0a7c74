"""voicesign - voice identity enrollment, verification and voice-signature signing."""

__version__ = "0.1.0"
