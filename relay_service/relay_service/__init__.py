"""Order relay service: validate, sign and forward order submissions."""

__version__ = "0.1.0"
