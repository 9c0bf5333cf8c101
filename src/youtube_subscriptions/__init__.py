"""Browse the latest videos of your YouTube subscriptions in a terminal."""

__version__ = "0.4.0"
