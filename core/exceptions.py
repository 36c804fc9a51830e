from rest_framework import status
from rest_framework.exceptions import APIException


class IllegalTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This status change is not allowed.'
    default_code = 'illegal_transition'

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f'Cannot move an appointment from "{current}" to "{requested}".')
