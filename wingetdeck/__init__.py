"""wingetdeck — catalog reconciliation and install control plane."""

__version__ = "0.1.0"
