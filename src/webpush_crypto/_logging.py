"""Package logger helpers.

The library never configures handlers; applications opt in with
``logging.getLogger("webpush_crypto").setLevel(logging.DEBUG)``.
"""

import logging

_ROOT_LOGGER_NAME = "webpush_crypto"

logging.getLogger(_ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger named ``webpush_crypto.<suffix>``
    """
    if name == _ROOT_LOGGER_NAME or name.startswith(_ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
