# backend/services/errors.py


class DocumentError(Exception):
    """Base class for failures while producing a job document"""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'success': False, 'error': self.message}


class InputError(DocumentError):
    """Missing or invalid request data, or a job/customer that does not exist"""
    status_code = 400


class RenderError(DocumentError):
    """A renderer backend failed while serializing a document"""
    status_code = 500
