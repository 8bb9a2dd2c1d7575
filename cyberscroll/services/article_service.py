"""文章服务：可见性、分类使用次数同步、互动统计与精选晋升"""
from datetime import datetime

from flask import current_app
from sqlalchemy import or_, and_

from cyberscroll.extensions import db, cache
from cyberscroll.exceptions import NotFound, PermissionDenied
from cyberscroll.models import Article, Category

FEATURED_CACHE_KEY = 'public:featured-articles'
FEATURED_LIMIT = 6


def public_filter():
    """访客可见：已发布且公开"""
    return and_(Article.status == Article.STATUS_PUBLISHED,
                Article.visibility == Article.VISIBILITY_PUBLIC)


def normalize_tags(tags):
    return {t.strip().lower() for t in (tags or []) if t and t.strip()}


class ArticleService:
    """文章业务逻辑"""

    @staticmethod
    def visible_query(claims):
        """
        当前用户可见的文章
        管理员：全部；普通用户：自己的文章 + 已发布的公开文章
        """
        query = Article.query
        if claims.is_admin:
            return query
        return query.filter(or_(Article.author_id == claims.user_id, public_filter()))

    @staticmethod
    def public_query():
        return Article.query.filter(public_filter())

    @staticmethod
    def get_or_404(article_id):
        article = db.session.get(Article, article_id)
        if article is None:
            raise NotFound('Article not found')
        return article

    @staticmethod
    def get_public_or_404(article_id):
        """访客只能访问已发布的公开文章，其余一律视为不存在"""
        article = db.session.get(Article, article_id)
        if article is None or not article.is_public:
            raise NotFound('Article not found')
        return article

    @staticmethod
    def ensure_readable(article, claims):
        """私有文章或草稿只有作者和管理员可以阅读"""
        if claims.is_admin or article.author_id == claims.user_id:
            return
        if not article.is_public:
            raise PermissionDenied('You do not have permission to view this article')

    @staticmethod
    def filter_by_tag(articles, tag):
        """标签过滤（大小写不敏感）"""
        wanted = tag.strip().lower()
        return [a for a in articles if wanted in normalize_tags(a.tags)]

    @staticmethod
    def search_filter(term):
        like = f'%{term}%'
        return or_(Article.title.ilike(like), Article.excerpt.ilike(like), Article.content.ilike(like))

    @staticmethod
    def make_excerpt(content, length=200):
        text = ' '.join((content or '').split())
        return text if len(text) <= length else text[:length].rstrip() + '...'

    @staticmethod
    def apply_status(article, status):
        """切换状态；首次发布时记录 publishedAt"""
        article.status = status
        if status == Article.STATUS_PUBLISHED and article.published_at is None:
            article.published_at = datetime.utcnow()

    @staticmethod
    def sync_category_usage(old_tags, new_tags):
        """
        分类使用次数同步：与分类同名的标签计为一次使用
        新增的标签 +1，移除的标签 -1（最低为 0）
        """
        old, new = normalize_tags(old_tags), normalize_tags(new_tags)
        added, removed = new - old, old - new
        if not added and not removed:
            return

        for category in Category.query.all():
            key = category.name.lower()
            if key in added:
                category.usage_count = (category.usage_count or 0) + 1
            elif key in removed:
                category.usage_count = max(0, (category.usage_count or 0) - 1)

    @staticmethod
    def bump(article, attr, delta=1):
        """调整计数器（like_count / comment_count / share_count），最低为 0"""
        setattr(article, attr, max(0, (getattr(article, attr) or 0) + delta))

    @staticmethod
    def check_featured(article):
        """
        互动总数（点赞 + 评论 + 分享）达到阈值时晋升为精选
        :return: 本次是否新晋升
        """
        threshold = current_app.config['FEATURED_ENGAGEMENT_THRESHOLD']
        if not article.is_featured and article.engagement_total >= threshold:
            article.is_featured = True
            current_app.logger.info(f'文章晋升精选: {article.id} (互动 {article.engagement_total})')
            return True
        return False

    @staticmethod
    def engagement(article):
        return {
            'likes': article.like_count or 0,
            'comments': article.comment_count or 0,
            'shares': article.share_count or 0,
            'total': article.engagement_total,
        }

    @staticmethod
    def featured_articles():
        """精选文章（最多 6 篇，结果缓存）：精选在前，其余按互动总数补足"""
        payload = cache.get(FEATURED_CACHE_KEY)
        if payload is not None:
            return payload

        articles = ArticleService.public_query().all()
        articles.sort(key=lambda a: (bool(a.is_featured), a.engagement_total,
                                     a.published_at or datetime.min), reverse=True)
        payload = [a.to_dict() for a in articles[:FEATURED_LIMIT]]
        cache.set(FEATURED_CACHE_KEY, payload, timeout=300)
        return payload

    @staticmethod
    def invalidate_featured():
        cache.delete(FEATURED_CACHE_KEY)

    @staticmethod
    def overview(query):
        """文章统计"""
        articles = query.all()
        most_viewed = max(articles, key=lambda a: a.views or 0, default=None)
        return {
            'total': len(articles),
            'published': sum(1 for a in articles if a.status == Article.STATUS_PUBLISHED),
            'drafts': sum(1 for a in articles if a.status == Article.STATUS_DRAFT),
            'public': sum(1 for a in articles if a.visibility == Article.VISIBILITY_PUBLIC),
            'private': sum(1 for a in articles if a.visibility == Article.VISIBILITY_PRIVATE),
            'totalViews': sum(a.views or 0 for a in articles),
            'totalLikes': sum(a.like_count or 0 for a in articles),
            'totalComments': sum(a.comment_count or 0 for a in articles),
            'mostViewed': most_viewed.to_dict() if most_viewed else None,
        }
