from flask_sqlalchemy import SQLAlchemy
from flask_caching import Cache

# 初始化扩展对象 (暂不绑定 app)
db = SQLAlchemy()
cache = Cache()
