"""
Exceptions raised by the dataminer.

Every error derives from DataMinerError so the polling loop can log and drop a
failed gym/date fetch without catching unrelated exceptions.
"""

from __future__ import annotations


class DataMinerError(Exception):
    """Base exception for all dataminer errors."""

    pass


class NetworkError(DataMinerError):
    """Transport or HTTP failure while talking to the booking site."""

    pass


class CantFindElement(DataMinerError):
    """An expected element, attribute or text pattern is missing."""

    def __init__(self, what: str) -> None:
        super().__init__(f"Can't find element: {what}")
        self.what = what


class InvalidCredentialsSessionExpired(DataMinerError):
    """Sign-in did not land on the profile page."""

    def __init__(self, landed_url: str | None = None) -> None:
        super().__init__("Invalid login credentials/session expired!")
        self.landed_url = landed_url


class FailedToParsePEM(DataMinerError):
    def __init__(self) -> None:
        super().__init__("Failed to parse PEM!")


class FailedToGenerateKeyFromPEM(DataMinerError):
    def __init__(self) -> None:
        super().__init__("Failed to generate key from PEM!")


class FailedToParseSelector(DataMinerError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"Failed to parse selector: {selector}")
        self.selector = selector


class FailedToParseUrl(DataMinerError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Failed to parse url: {url}")
        self.url = url


class InvalidGym(DataMinerError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid gym: {name}")
        self.name = name


class IoError(DataMinerError):
    """Writing a snapshot to disk failed."""

    pass
