"""
ビーチボールバレー コミュニティ - 例外定義
"""


class AppError(Exception):
    """API でそのまま利用者に返せるエラー"""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'success': False, 'message': self.message, 'code': self.status_code}


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    """承認ステータスの不正な遷移"""


class DateParseError(ValueError):
    """開催日が既知の形式で解釈できない"""

    def __init__(self, value):
        super().__init__(f'Invalid date format: {value!r}')
        self.value = value
