from cyberscroll.extensions import db
from .base import BaseModel


class Comment(BaseModel):
    """访客评论"""
    __tablename__ = 'pub_comments'

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUSES = (STATUS_PENDING, STATUS_APPROVED)

    article_id = db.Column(db.String(36), index=True, nullable=False)
    author = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(128), nullable=False)
    content = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), default=STATUS_APPROVED, index=True)


class Like(BaseModel):
    """访客点赞，visitor_id 由浏览器本地生成"""
    __tablename__ = 'pub_likes'
    __table_args__ = (db.UniqueConstraint('article_id', 'visitor_id', name='uq_like_visitor'),)

    article_id = db.Column(db.String(36), index=True, nullable=False)
    visitor_id = db.Column(db.String(128), nullable=False)


class ContactMessage(BaseModel):
    """联系表单留言"""
    __tablename__ = 'pub_messages'

    STATUS_UNREAD = 'unread'
    STATUS_READ = 'read'
    STATUSES = (STATUS_UNREAD, STATUS_READ)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(128), nullable=False)
    subject = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), default=STATUS_UNREAD, index=True)
