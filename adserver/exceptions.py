from rest_framework import status
from rest_framework.exceptions import APIException


class AdServerError(APIException):
    """Base class for errors raised by the campaign store and delivery engine"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Ad server error.'
    default_code = 'ad_server_error'


class ValidationError(AdServerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'


class NotFoundError(AdServerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class PersistenceError(AdServerError):
    # Store unreachable or write failed; never retried by the engine itself
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Storage is unavailable.'
    default_code = 'persistence_error'
