from flask import Blueprint

# 访客接口，无需认证；url_prefix 在 cyberscroll/__init__.py 注册时设置
public_bp = Blueprint('public', __name__)

from . import routes
