from flask import jsonify, current_app

from cyberscroll.blueprints.public import public_bp
from cyberscroll.blueprints.public.forms import (PublicArticleListForm, CommentForm, LikeForm,
                                                 ShareForm, ContactForm)
from cyberscroll.exceptions import ValidationError
from cyberscroll.extensions import db
from cyberscroll.models import Article, Comment, Like, ContactMessage
from cyberscroll.services.article_service import ArticleService
from cyberscroll.services.notification_service import NotificationService
from cyberscroll.utils.pagination import paginate, paginate_list
from cyberscroll.utils.permissions import optional_auth, current_claims
from cyberscroll.utils.security import rate_limit, sanitize_input


@public_bp.route('/articles')
def list_articles():
    """已发布的公开文章，按发布时间倒序"""
    form = PublicArticleListForm.parse()
    page, limit = form.paging

    query = ArticleService.public_query()
    if form.search.data:
        query = query.filter(ArticleService.search_filter(form.search.data))
    query = query.order_by(Article.published_at.desc(), Article.id)

    if form.category.data:
        articles, pagination = paginate_list(
            ArticleService.filter_by_tag(query.all(), form.category.data), page, limit)
    else:
        articles, pagination = paginate(query, page, limit)

    return jsonify({'articles': [a.to_dict() for a in articles], 'pagination': pagination})


@public_bp.route('/articles/featured')
def featured_articles():
    return jsonify({'articles': ArticleService.featured_articles()})


@public_bp.route('/articles/<article_id>')
@optional_auth
def get_article(article_id):
    """公开文章详情，作者本人带令牌阅读时不计浏览量"""
    article = ArticleService.get_public_or_404(article_id)
    claims = current_claims()
    if claims is None or claims.user_id != article.author_id:
        article.views = (article.views or 0) + 1
        db.session.commit()
    return jsonify({'article': article.to_dict()})


@public_bp.route('/articles/<article_id>/comments')
def list_comments(article_id):
    """只返回已审核的评论"""
    article = ArticleService.get_public_or_404(article_id)
    comments = (Comment.query
                .filter_by(article_id=article.id, status=Comment.STATUS_APPROVED)
                .order_by(Comment.created_at.desc())
                .all())
    return jsonify({'comments': [c.to_dict() for c in comments], 'total': len(comments)})


@public_bp.route('/articles/<article_id>/comments', methods=['POST'])
def add_comment(article_id):
    article = ArticleService.get_public_or_404(article_id)
    form = CommentForm().validate_or_raise()

    content = sanitize_input(form.content.data)
    if not content:
        raise ValidationError('Comment content cannot be empty', error='Missing required fields')

    author = sanitize_input(form.author.data)
    if len(author) < 2:
        raise ValidationError('Author must be between 2 and 100 characters')

    auto_approve = current_app.config['COMMENT_AUTO_APPROVE']
    comment = Comment(
        article_id=article.id,
        author=author,
        email=form.email.data.lower(),
        content=content,
        status=Comment.STATUS_APPROVED if auto_approve else Comment.STATUS_PENDING,
    )
    db.session.add(comment)

    if comment.status == Comment.STATUS_APPROVED:
        ArticleService.bump(article, 'comment_count')
        ArticleService.check_featured(article)
    db.session.commit()
    ArticleService.invalidate_featured()

    NotificationService.notify_admin('comment', article_title=article.title, author=comment.author,
                                     email=comment.email, content=comment.content)

    message = 'Comment added successfully' if auto_approve else 'Comment submitted for review'
    return jsonify({'message': message, 'comment': comment.to_dict()}), 201


@public_bp.route('/articles/<article_id>/like', methods=['POST'])
def toggle_like(article_id):
    """同一访客再次点赞即取消"""
    article = ArticleService.get_public_or_404(article_id)
    visitor_id = LikeForm().validate_or_raise().visitor_id.data

    existing = Like.query.filter_by(article_id=article.id, visitor_id=visitor_id).first()
    if existing is not None:
        db.session.delete(existing)
        liked = False
    else:
        db.session.add(Like(article_id=article.id, visitor_id=visitor_id))
        liked = True

    ArticleService.bump(article, 'like_count', 1 if liked else -1)
    ArticleService.check_featured(article)
    db.session.commit()
    ArticleService.invalidate_featured()

    if liked:
        NotificationService.notify_admin('like', article_title=article.title, visitor_id=visitor_id)

    return jsonify({
        'message': f"Article {'liked' if liked else 'unliked'} successfully",
        'liked': liked,
        'likeCount': article.like_count,
    })


@public_bp.route('/articles/<article_id>/share', methods=['POST'])
def share_article(article_id):
    article = ArticleService.get_public_or_404(article_id)
    form = ShareForm().validate_or_raise()

    ArticleService.bump(article, 'share_count')
    ArticleService.check_featured(article)
    db.session.commit()
    ArticleService.invalidate_featured()

    NotificationService.notify_admin('share', article_title=article.title,
                                     visitor_id=form.visitor_id.data, platform=form.platform.data)

    return jsonify({
        'message': 'Article shared successfully',
        'shareCount': article.share_count,
        'platform': form.platform.data,
    })


@public_bp.route('/articles/<article_id>/engagement')
def engagement(article_id):
    article = ArticleService.get_public_or_404(article_id)
    return jsonify(ArticleService.engagement(article))


@public_bp.route('/contact', methods=['POST'])
@rate_limit()
def contact():
    """联系表单"""
    form = ContactForm().validate_or_raise()

    name, subject, body = (sanitize_input(f.data) for f in (form.name, form.subject, form.message))
    if not (name and subject and body):
        raise ValidationError('Name, email, subject, and message are required', error='Missing required fields')

    message = ContactMessage(
        name=name,
        email=form.email.data.lower(),
        subject=subject,
        message=body,
        status=ContactMessage.STATUS_UNREAD,
    )
    message.save()

    NotificationService.notify_admin('contact', name=message.name, email=message.email,
                                     subject=message.subject, message=message.message)

    current_app.logger.info(f'收到联系留言: {message.id} from {message.email}')
    return jsonify({'message': 'Message sent successfully', 'messageId': message.id}), 201
