from fastapi import status

class BaseAppException(Exception):
    """Base exception for application"""
    error_code = "APP_ERROR"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self):
        """Return error response as dictionary with error code"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code
        }

class BadRequestException(BaseAppException):
    """Raised when the caller sent a payload the service refuses"""
    error_code = "BAD_REQUEST"

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)

class NotFoundException(BaseAppException):
    """Raised when a target record does not exist"""
    error_code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class MovieAlreadyExistsException(BadRequestException):
    """Raised when a movie with the same title and release date exists"""
    error_code = "MOVIE_ALREADY_EXISTS"

    def __init__(self, message: str = "Movie already exists!"):
        super().__init__(message)

class SlugUpdateNotAllowedException(BadRequestException):
    """Raised when an update payload tries to set the slug"""
    error_code = "SLUG_NOT_ALLOWED"

    def __init__(self, message: str = "You cannot set slug directly!"):
        super().__init__(message)

class MovieNotFoundException(NotFoundException):
    """Raised when movie is not found"""
    error_code = "MOVIE_NOT_FOUND"

    def __init__(self, message: str = "Movie not found"):
        super().__init__(message)
