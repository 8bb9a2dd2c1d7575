from cyberscroll.extensions import db
from .base import BaseModel


class Article(BaseModel):
    """博客文章"""
    __tablename__ = 'cms_articles'

    VISIBILITY_PRIVATE = 'private'
    VISIBILITY_PUBLIC = 'public'
    VISIBILITIES = (VISIBILITY_PRIVATE, VISIBILITY_PUBLIC)

    STATUS_DRAFT = 'draft'
    STATUS_PUBLISHED = 'published'
    STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED)

    author_id = db.Column(db.String(36), db.ForeignKey('auth_users.id'), index=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)  # Markdown 原文
    excerpt = db.Column(db.String(500), default='')
    tags = db.Column(db.JSON, default=list)

    visibility = db.Column(db.String(16), default=VISIBILITY_PRIVATE, index=True)
    status = db.Column(db.String(16), default=STATUS_DRAFT, index=True)
    published_at = db.Column(db.DateTime)

    # 计数器
    views = db.Column(db.Integer, default=0)
    like_count = db.Column(db.Integer, default=0)
    comment_count = db.Column(db.Integer, default=0)
    share_count = db.Column(db.Integer, default=0)
    is_featured = db.Column(db.Boolean, default=False)

    author = db.relationship('User')

    @property
    def is_public(self):
        """对访客可见：已发布且公开"""
        return self.status == self.STATUS_PUBLISHED and self.visibility == self.VISIBILITY_PUBLIC

    @property
    def engagement_total(self):
        return (self.like_count or 0) + (self.comment_count or 0) + (self.share_count or 0)

    def to_dict(self):
        data = super().to_dict()
        data['tags'] = list(self.tags or [])
        data['author'] = self.author.name if self.author else None
        return data

    def __repr__(self):
        return f'<Article {self.title!r}>'


class Category(BaseModel):
    """文章分类（与文章标签同名即计入使用次数）"""
    __tablename__ = 'cms_categories'

    DEFAULT_COLOR = '#3b82f6'

    name = db.Column(db.String(50), nullable=False, index=True)
    description = db.Column(db.String(200), default='')
    color = db.Column(db.String(7), default=DEFAULT_COLOR)
    usage_count = db.Column(db.Integer, default=0)

    @classmethod
    def find_by_name(cls, name):
        """名称大小写不敏感查找"""
        if not name:
            return None
        return cls.query.filter(db.func.lower(cls.name) == name.strip().lower()).first()

    def __repr__(self):
        return f'<Category {self.name}>'


class Document(BaseModel):
    """上传的文件附件"""
    __tablename__ = 'cms_documents'

    user_id = db.Column(db.String(36), index=True)
    file_name = db.Column(db.String(256))  # 磁盘上的唯一文件名
    original_name = db.Column(db.String(256))
    file_path = db.Column(db.String(512))
    file_type = db.Column(db.String(128))
    file_size = db.Column(db.Integer, default=0)  # 字节数
    tags = db.Column(db.JSON, default=list)
    linked_article_id = db.Column(db.String(36), nullable=True)
    description = db.Column(db.Text, default='')

    def to_dict(self):
        from cyberscroll.utils.file_helper import format_size

        data = super().to_dict()
        data['tags'] = list(self.tags or [])
        data['uploadedAt'] = data.pop('createdAt')
        data['formattedSize'] = format_size(self.file_size or 0)
        return data
