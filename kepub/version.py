import os

APP_VERSION = os.environ.get("APP_VERSION", "dev")


def get_version():
    """Returns the running version string, 'dev' for local checkouts."""
    return APP_VERSION
