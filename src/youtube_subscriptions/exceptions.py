class SetupError(Exception):
    """
    The application cannot start: configuration or subscriptions are missing or broken.

    The message is shown to the user as is, so it must say what to do.
    """
