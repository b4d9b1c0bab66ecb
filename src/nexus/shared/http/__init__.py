from .errors import request_error_handler

__all__ = ["request_error_handler"]
