from flask import jsonify, current_app

from cyberscroll.blueprints.articles import articles_bp
from cyberscroll.blueprints.articles.forms import (ArticleForm, ArticleUpdateForm,
                                                   ArticleListForm, CommentStatusForm)
from cyberscroll.exceptions import NotFound
from cyberscroll.extensions import db
from cyberscroll.models import Article, Comment
from cyberscroll.services.article_service import ArticleService
from cyberscroll.utils.permissions import token_required, ensure_owner, current_claims
from cyberscroll.utils.pagination import paginate, paginate_list, apply_sort


@articles_bp.route('/')
@token_required
def list_articles():
    """文章列表（按身份过滤可见范围）"""
    form = ArticleListForm.parse()
    page, limit = form.paging

    query = ArticleService.visible_query(current_claims())
    if form.status.data:
        query = query.filter(Article.status == form.status.data)
    if form.visibility.data:
        query = query.filter(Article.visibility == form.visibility.data)
    if form.author_id.data:
        query = query.filter(Article.author_id == form.author_id.data)
    if form.search.data:
        query = query.filter(ArticleService.search_filter(form.search.data))

    query = apply_sort(query, Article, form.sort_by.data or 'createdAt',
                       form.descending, ArticleListForm.SORT_COLUMNS)

    # 标签存放在 JSON 列中，在内存中过滤后再分页
    if form.tag.data:
        articles, pagination = paginate_list(
            ArticleService.filter_by_tag(query.all(), form.tag.data), page, limit)
    else:
        articles, pagination = paginate(query, page, limit)

    return jsonify({
        'articles': [a.to_dict() for a in articles],
        'pagination': pagination,
    })


@articles_bp.route('/stats/overview')
@token_required
def stats_overview():
    query = ArticleService.visible_query(current_claims())
    return jsonify({'stats': ArticleService.overview(query)})


@articles_bp.route('/<article_id>')
@token_required
def get_article(article_id):
    """文章详情，非作者阅读时浏览量 +1"""
    claims = current_claims()
    article = ArticleService.get_or_404(article_id)
    ArticleService.ensure_readable(article, claims)

    if article.author_id != claims.user_id:
        article.views = (article.views or 0) + 1
        db.session.commit()

    return jsonify({'article': article.to_dict()})


@articles_bp.route('/', methods=['POST'])
@token_required
def create_article():
    form = ArticleForm().validate_or_raise()
    claims = current_claims()

    article = Article(
        author_id=claims.user_id,
        title=form.title.data,
        content=form.content.data,
        excerpt=form.excerpt.data or ArticleService.make_excerpt(form.content.data),
        tags=form.tags.data,
        visibility=form.visibility.data or Article.VISIBILITY_PRIVATE,
    )
    ArticleService.apply_status(article, form.status.data or Article.STATUS_DRAFT)
    ArticleService.sync_category_usage([], article.tags)

    db.session.add(article)
    db.session.commit()
    ArticleService.invalidate_featured()

    current_app.logger.info(f'文章已创建: {article.id} by {claims.email}')
    return jsonify({'message': 'Article created successfully', 'article': article.to_dict()}), 201


@articles_bp.route('/<article_id>', methods=['PUT'])
@token_required
def update_article(article_id):
    """编辑文章（部分更新）"""
    article = ArticleService.get_or_404(article_id)
    ensure_owner(article.author_id, 'You can only edit your own articles')

    form = ArticleUpdateForm().validate_or_raise()
    changes = form.supplied_data()

    if 'tags' in changes:
        ArticleService.sync_category_usage(article.tags, changes['tags'])
        article.tags = list(changes['tags'])

    for attr in ('title', 'content', 'visibility'):
        if attr in changes:
            setattr(article, attr, changes[attr])

    if 'excerpt' in changes:
        article.excerpt = changes['excerpt'] or ArticleService.make_excerpt(article.content)

    if 'status' in changes:
        ArticleService.apply_status(article, changes['status'])

    db.session.commit()
    ArticleService.invalidate_featured()

    current_app.logger.info(f'文章已更新: {article.id} ({", ".join(changes) or "no changes"})')
    return jsonify({'message': 'Article updated successfully', 'article': article.to_dict()})


@articles_bp.route('/<article_id>', methods=['DELETE'])
@token_required
def delete_article(article_id):
    article = ArticleService.get_or_404(article_id)
    ensure_owner(article.author_id, 'You can only delete your own articles')

    ArticleService.sync_category_usage(article.tags, [])
    db.session.delete(article)
    db.session.commit()
    ArticleService.invalidate_featured()

    current_app.logger.info(f'文章已删除: {article_id}')
    return jsonify({'message': 'Article deleted successfully'})


@articles_bp.route('/<article_id>/comments')
@token_required
def article_comments(article_id):
    """作者或管理员查看全部评论（含待审核）"""
    article = ArticleService.get_or_404(article_id)
    ensure_owner(article.author_id, 'You can only view comments on your own articles')

    comments = (Comment.query.filter_by(article_id=article.id)
                .order_by(Comment.created_at.desc()).all())
    return jsonify({'comments': [c.to_dict() for c in comments], 'total': len(comments)})


@articles_bp.route('/comments/<comment_id>', methods=['PUT'])
@token_required
def moderate_comment(comment_id):
    """审核评论：pending / approved"""
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFound('Comment not found')

    article = ArticleService.get_or_404(comment.article_id)
    ensure_owner(article.author_id, 'You can only moderate comments on your own articles')

    form = CommentStatusForm().validate_or_raise()
    if comment.status != form.status.data:
        delta = 1 if form.status.data == Comment.STATUS_APPROVED else -1
        comment.status = form.status.data
        ArticleService.bump(article, 'comment_count', delta)

    ArticleService.check_featured(article)
    db.session.commit()
    ArticleService.invalidate_featured()

    return jsonify({'message': 'Comment updated successfully', 'comment': comment.to_dict()})
