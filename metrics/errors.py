"""Errors raised while wiring metrics at startup"""


class ConfigurationError(Exception):
    """Invalid metric configuration.

    Only raised while metrics are being registered. Nothing in this package
    catches it, so a bad configuration stops the process before it starts
    serving.
    """
