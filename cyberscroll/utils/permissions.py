"""
权限控制工具
提供装饰器和辅助函数用于检查令牌身份与资源归属
"""
from functools import wraps
from flask import g

from cyberscroll.exceptions import AuthenticationError, PermissionDenied, CyberScrollException
from cyberscroll.utils.tokens import authenticate_request


def current_claims():
    """当前请求的 TokenClaims，未认证时为 None"""
    return g.get('current_user')


def token_required(f):
    """
    认证装饰器
    请求必须携带有效的 Bearer 令牌
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.current_user = authenticate_request()
        return f(*args, **kwargs)
    return decorated_function


def optional_auth(f):
    """可选认证：令牌有效时挂载用户，否则当作匿名访客"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            g.current_user = authenticate_request()
        except CyberScrollException:
            g.current_user = None
        return f(*args, **kwargs)
    return decorated_function


def role_required(*roles):
    """
    角色检查装饰器

    用法:
        @role_required('admin')
        def list_users():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            claims = current_claims()
            if claims is None:
                claims = g.current_user = authenticate_request()

            if claims.role not in roles:
                raise PermissionDenied('Only admin can access this resource'
                                       if roles == ('admin',)
                                       else 'Insufficient role for this resource')

            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required('admin')


def ensure_owner(owner_id, message='You can only access your own resources'):
    """
    资源归属检查：管理员拥有所有资源，其他用户只能操作自己的资源
    """
    claims = current_claims()
    if claims is None:
        raise AuthenticationError()
    if claims.is_admin:
        return
    if owner_id != claims.user_id:
        raise PermissionDenied(message)
