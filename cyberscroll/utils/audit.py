"""
审计日志工具模块
用于记录管理员登录等敏感操作
"""
import json
from functools import wraps

from flask import request

from cyberscroll.extensions import db
from cyberscroll.models.sys import AuditLog
from cyberscroll.utils.permissions import current_claims


def log_action(module, action, details=None, user_id=None):
    """
    记录审计日志
    :param module: 模块名称 (如 'auth', 'articles', 'users')
    :param action: 操作名称 (如 'admin_login_success', 'delete_account')
    :param details: 详细信息 (dict)
    :param user_id: 操作者，默认取当前令牌中的用户（匿名请求为空）
    """
    if user_id is None:
        claims = current_claims()
        user_id = claims.user_id if claims else None

    log = AuditLog(
        user_id=user_id,
        module=module,
        action=action,
        ip_address=request.remote_addr,
        user_agent=(request.user_agent.string or '')[:256],
        details=json.dumps(details, ensure_ascii=False) if details else None
    )
    db.session.add(log)
    db.session.commit()
    return log


def audit_log(module, action):
    """
    审计日志装饰器（在视图成功返回后记录）
    使用方法:
    @audit_log('auth', 'logout')
    def logout():
        pass
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            result = f(*args, **kwargs)
            log_action(module, action, kwargs or None)
            return result
        return decorated_function
    return decorator
