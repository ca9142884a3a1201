class AppException(Exception):
    def __init__(self, detail: str, status_code: int = 400):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

class BadRequestException(AppException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(detail=detail, status_code=400)

class UnauthorizedException(AppException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail=detail, status_code=401)

class ConflictException(AppException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(detail=detail, status_code=409)

class NotFoundException(AppException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(detail=detail, status_code=404)


class ConfigurationError(AppException):
    """A required setting is missing or unusable. Never caused by user input."""
    def __init__(self, detail: str = "Server misconfiguration"):
        super().__init__(detail=detail, status_code=500)


class TokenVerificationError(UnauthorizedException):
    pass

class InvalidTokenError(TokenVerificationError):
    """Bad signature, malformed token, or a token of the wrong class."""
    def __init__(self, detail: str = "Could not validate credentials."):
        super().__init__(detail=detail)

class TokenExpiredError(TokenVerificationError):
    def __init__(self, detail: str = "Token expired"):
        super().__init__(detail=detail)
