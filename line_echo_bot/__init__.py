"""LINE Messaging API echo bot."""

__version__ = "0.1.0"
