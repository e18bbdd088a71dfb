"""Authentication-specific exceptions."""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Base authentication error."""

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsError(AuthenticationError):
    """Invalid credentials provided."""

    def __init__(self) -> None:
        super().__init__(detail="Invalid email or password")


class InvalidTokenError(AuthenticationError):
    """Invalid token provided."""

    def __init__(self) -> None:
        super().__init__(detail="Invalid token")


class AuthorizationError(HTTPException):
    """Authenticated, but not allowed to use this endpoint."""

    def __init__(self, detail: str = "Admin access required") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class AuthProviderNotConfiguredError(HTTPException):
    """Auth provider not properly configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Authentication provider '{provider}' is not properly configured",
        )
