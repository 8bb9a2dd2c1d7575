class CyberScrollException(Exception):
    """CyberScroll API 基础异常类"""
    error = 'Internal Server Error'

    def __init__(self, message, code=500, error=None, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        if error:
            self.error = error
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['error'] = self.error
        rv['message'] = self.message
        rv['code'] = self.code
        rv['success'] = False
        return rv


class ValidationError(CyberScrollException):
    """请求数据校验失败"""
    error = 'Validation failed'

    def __init__(self, message="Invalid data", error=None, payload=None):
        super().__init__(message, code=400, error=error, payload=payload)


class FileTooLarge(ValidationError):
    """上传文件超过大小限制"""
    error = 'File too large'


class AuthenticationError(CyberScrollException):
    """未认证或令牌无效"""
    error = 'Authentication required'

    def __init__(self, message="Please login to access this resource", error=None, payload=None):
        super().__init__(message, code=401, error=error, payload=payload)


class PermissionDenied(CyberScrollException):
    """权限不足"""
    error = 'Access denied'

    def __init__(self, message="Access denied", error=None, payload=None):
        super().__init__(message, code=403, error=error, payload=payload)


class NotFound(CyberScrollException):
    """资源不存在"""
    error = 'Not Found'

    def __init__(self, message="The requested resource was not found", error=None, payload=None):
        super().__init__(message, code=404, error=error, payload=payload)
