"""
安全工具函数
"""
import re
from collections import deque
from datetime import datetime, timedelta
from functools import wraps

from flask import request, abort, current_app

# 速率限制存储（生产环境应使用 Redis）
_rate_limit_storage = {}


def hit_rate_limit(key, max_requests=None, window=None):
    """
    记录一次请求，超过时间窗口内的上限时返回 429

    Args:
        key: 计数键（作用域 + 客户端 IP）
        max_requests: 时间窗口内最大请求数（默认读取 RATELIMIT_MAX_REQUESTS）
        window: 时间窗口（秒，默认读取 RATELIMIT_WINDOW）
    """
    limit = max_requests or current_app.config['RATELIMIT_MAX_REQUESTS']
    seconds = window or current_app.config['RATELIMIT_WINDOW']

    now = datetime.now()
    hits = _rate_limit_storage.setdefault(key, deque())

    # 清理过期记录
    while hits and now - hits[0] >= timedelta(seconds=seconds):
        hits.popleft()

    # 检查是否超限
    if len(hits) >= limit:
        abort(429, description='Too many requests from this IP, please try again later.')

    # 记录本次请求
    hits.append(now)


def rate_limit(max_requests=None, window=None):
    """
    API速率限制装饰器（在全局 /api 限流之外，单独为敏感接口计数）
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if current_app.config.get('RATELIMIT_ENABLED', True):
                # 获取客户端标识（IP地址）
                hit_rate_limit(f"{func.__name__}:{request.remote_addr}", max_requests, window)
            return func(*args, **kwargs)
        return wrapper
    return decorator


def sanitize_input(text):
    """
    清理访客输入：移除 HTML 标签，防止评论/留言中的 XSS
    """
    if not text:
        return text
    text = re.sub(r'<[^>]+>', '', text)
    return text.strip()


def check_password_strength(password):
    """
    检查密码强度

    Returns:
        (bool, str): (是否通过, 错误信息)
    """
    if len(password) < 8:
        return False, 'Password must be at least 8 characters'

    if not re.search(r'[a-z]', password):
        return False, 'Password must contain at least one lowercase letter'

    if not re.search(r'[A-Z]', password):
        return False, 'Password must contain at least one uppercase letter'

    if not re.search(r'\d', password):
        return False, 'Password must contain at least one number'

    if not re.search(r'[^A-Za-z0-9]', password):
        return False, 'Password must contain at least one special character'

    return True, ''
