import logging

import colorlog
import jwt
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import config
from cyberscroll.extensions import db, cache
from cyberscroll.exceptions import CyberScrollException
from cyberscroll.utils.security import hit_rate_limit

# 导入 commands 模块，用于注册 CLI 命令
from cyberscroll import commands


def create_app(config_name='default', config_overrides=None):
    """CyberScroll 应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    if config_overrides:
        app.config.update(config_overrides)
    config[config_name].init_app(app)

    # /api/articles 与 /api/articles/ 等价
    app.url_map.strict_slashes = False

    # 2. 初始化扩展
    db.init_app(app)
    cache.init_app(app)

    # 3. 配置日志
    configure_logging(app)

    # 4. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 5. 跨域与请求日志
    register_request_hooks(app)

    # 6. 注册全局错误处理
    register_error_handlers(app)

    # 7. 注册 CLI 命令
    register_commands(app)

    # 8. 建表并写入演示数据（内存库每次启动都是空的）
    init_mock_database(app)

    return app


def init_mock_database(app):
    """创建内存库表结构，按配置写入演示数据"""
    from cyberscroll.seed import seed_mock_data

    with app.app_context():
        db.create_all()
        if app.config['SEED_MOCK_DATA']:
            counts = seed_mock_data()
            app.logger.info(f'演示数据已加载: {counts}')


def register_blueprints(app):
    """注册所有业务模块蓝图"""
    # 健康检查与上传文件访问
    from cyberscroll.blueprints.main import main_bp
    app.register_blueprint(main_bp)

    # 认证蓝图
    from cyberscroll.blueprints.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # 文章管理蓝图
    from cyberscroll.blueprints.articles import articles_bp
    app.register_blueprint(articles_bp, url_prefix='/api/articles')

    # 分类管理蓝图
    from cyberscroll.blueprints.categories import categories_bp
    app.register_blueprint(categories_bp, url_prefix='/api/categories')

    # 用户与后台管理蓝图
    from cyberscroll.blueprints.users import users_bp
    app.register_blueprint(users_bp, url_prefix='/api/users')

    # 文件上传蓝图
    from cyberscroll.blueprints.uploads import uploads_bp
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')

    # 访客接口蓝图
    from cyberscroll.blueprints.public import public_bp
    app.register_blueprint(public_bp, url_prefix='/api/public')


def register_request_hooks(app):
    @app.before_request
    def answer_preflight():
        """CORS 预检请求直接返回 200"""
        if request.method == 'OPTIONS' and request.path.startswith('/api/'):
            return app.make_default_options_response()

    @app.before_request
    def enforce_rate_limit():
        """所有 /api 接口按客户端 IP 共享一个滑动窗口"""
        if (app.config['RATELIMIT_ENABLED'] and request.method != 'OPTIONS'
                and request.path.startswith('/api/')):
            hit_rate_limit(f'api:{request.remote_addr}')

    @app.after_request
    def add_cors_headers(response):
        if request.path.startswith('/api/') or request.path.startswith('/uploads/'):
            response.headers['Access-Control-Allow-Origin'] = app.config['FRONTEND_URL']
            response.headers['Access-Control-Allow-Credentials'] = 'true'
            response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
            response.vary.add('Origin')
        return response

    @app.after_request
    def log_request(response):
        app.logger.info(f'{request.remote_addr} "{request.method} {request.full_path.rstrip("?")}" '
                        f'{response.status_code} {response.content_length or 0}')
        return response


def error_response(error, message, code, **extra):
    payload = {'success': False, 'error': error, 'message': message, 'code': code}
    payload.update(extra)
    return jsonify(payload), code


def register_error_handlers(app):
    @app.errorhandler(CyberScrollException)
    def handle_app_exception(e):
        if e.code >= 500:
            app.logger.error(f'{request.method} {request.path}: {e.message}')
        return jsonify(e.to_dict()), e.code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_request_too_large(e):
        limit = app.config['MAX_FILE_SIZE'] // (1024 * 1024)
        return error_response('File too large', f'File size must be less than {limit}MB', 400)

    @app.errorhandler(jwt.ExpiredSignatureError)
    def handle_expired_token(e):
        return error_response('Token expired', 'Please login again', 401)

    @app.errorhandler(jwt.InvalidTokenError)
    def handle_invalid_token(e):
        return error_response('Invalid token', 'Token is not valid', 401)

    @app.errorhandler(404)
    def not_found(e):
        return error_response('Not Found', f'Route {request.path} not found', 404)

    @app.errorhandler(429)
    def too_many_requests(e):
        return error_response('Too Many Requests', e.description, 429)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return error_response(e.name, e.description, e.code)

    @app.errorhandler(Exception)
    def internal_server_error(e):
        db.session.rollback()
        app.logger.exception(f'未处理的异常: {request.method} {request.path}')
        message = 'Something went wrong' if config_is_production(app) else str(e)
        return error_response('Internal Server Error', message, 500)


def config_is_production(app):
    return not app.debug and not app.testing


def register_commands(app):
    """注册 Flask CLI 命令"""
    app.cli.add_command(commands.forge)
    app.cli.add_command(commands.status)


def configure_logging(app):
    """配置彩色控制台日志，提升开发体验"""
    app.logger.setLevel(app.config['LOG_LEVEL'])

    if app.debug:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)

        formatter = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(blue)s%(message)s",
            datefmt="%H:%M:%S",
            reset=True,
            log_colors={
                'DEBUG':    'cyan',
                'INFO':     'green',
                'WARNING':  'yellow',
                'ERROR':    'red',
                'CRITICAL': 'red,bg_white',
            },
            secondary_log_colors={},
            style='%'
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
