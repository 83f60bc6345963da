"""Wallet client errors."""


class WalletError(Exception):
    """Base class for wallet session failures."""


class NoActiveSessionError(WalletError):
    """Operation needs a connected wallet but the session is disconnected."""

    def __init__(self, message: str = "No wallet connected"):
        super().__init__(message)


class ConnectionFailedError(WalletError):
    """Provider rejected or failed the account request."""

    def __init__(self, message: str = "Failed to connect wallet"):
        super().__init__(message)


class UnknownProviderError(WalletError):
    """No discovered provider matches the requested uuid."""

    def __init__(self, uuid: str):
        self.uuid = uuid
        super().__init__(f"Wallet provider not found: {uuid}")


class AuthRequestError(WalletError):
    """Challenge or authentication request was rejected by the server."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)
