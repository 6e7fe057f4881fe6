"""Single packet authorization: signed UDP packets, their checks, and a sending client."""

__version__ = "0.1.0"