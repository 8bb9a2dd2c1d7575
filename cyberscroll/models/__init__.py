# 按照依赖顺序导入
from .base import BaseModel
from .auth import User, ADMIN_USER_ID, DEFAULT_PREFERENCES
from .content import Article, Category, Document
from .engagement import Comment, Like, ContactMessage
from .sys import AuditLog
