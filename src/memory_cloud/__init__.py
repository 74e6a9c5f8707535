"""Memory Cloud: emotional families and idea links for short personal stories."""

__version__ = "0.1.0"
