"""Exceptions raised by the geocoder."""


class LoaderError(Exception):
    """The dataset source could not be read or lacks required columns."""


class IndexInconsistencyError(RuntimeError):
    """
    The spatial index referenced a dataset position that does not exist.

    This is never caused by user input; it means the index was built
    incorrectly.
    """
