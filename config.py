import os
from dotenv import load_dotenv

# 加载 .env 环境变量
load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """基础配置类"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'
    PORT = int(os.environ.get('PORT', 5000))
    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:3000')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # 内存数据库：进程重启后数据全部丢失
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SEED_MOCK_DATA = _env_flag('SEED_MOCK_DATA', 'true')

    # JWT 配置
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'your-secret-key'
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_DAYS = int(os.environ.get('JWT_EXPIRES_DAYS', 7))

    # 管理员密钥
    ADMIN_KEY = os.environ.get('ADMIN_KEY') or 'cyberscroll-admin-2024'

    # 表单仅用于 JSON 校验，不需要 CSRF
    WTF_CSRF_ENABLED = False

    # 文件上传配置
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'uploads')
    MAX_FILE_SIZE = 10 * 1024 * 1024  # 单文件 10MB
    MAX_FILES_PER_REQUEST = 5
    MAX_CONTENT_LENGTH = MAX_FILES_PER_REQUEST * MAX_FILE_SIZE + 1024 * 1024

    # 缓存配置 (默认使用 SimpleCache，生产环境可改 Redis)
    CACHE_TYPE = "SimpleCache"
    CACHE_DEFAULT_TIMEOUT = 300

    # 速率限制：每个 IP 15 分钟内 100 次
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', 'true')
    RATELIMIT_MAX_REQUESTS = int(os.environ.get('RATELIMIT_MAX_REQUESTS', 100))
    RATELIMIT_WINDOW = int(os.environ.get('RATELIMIT_WINDOW', 15 * 60))

    # 互动配置
    COMMENT_AUTO_APPROVE = _env_flag('COMMENT_AUTO_APPROVE', 'true')
    FEATURED_ENGAGEMENT_THRESHOLD = int(os.environ.get('FEATURED_ENGAGEMENT_THRESHOLD', 20))

    # 管理员邮件通知 (未配置时仅写日志)
    EMAIL_USER = os.environ.get('EMAIL_USER')
    EMAIL_PASS = os.environ.get('EMAIL_PASS')
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', 587))

    @staticmethod
    def init_app(app):
        # 确保上传目录存在
        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)


class TestingConfig(Config):
    TESTING = True
    CACHE_TYPE = "NullCache"
    RATELIMIT_ENABLED = False
    EMAIL_USER = None
    EMAIL_PASS = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
