from datetime import datetime

from flask import jsonify, request, send_file, current_app
from sqlalchemy import or_

from cyberscroll.blueprints.users import users_bp
from cyberscroll.blueprints.users.forms import (ProfileForm, PreferencesForm, AvatarForm, ExportForm,
                                                ImportForm, DeleteAccountForm, UserListForm,
                                                MessageListForm, AuditLogListForm)
from cyberscroll.blueprints.articles.forms import ArticleForm
from cyberscroll.exceptions import ValidationError, NotFound
from cyberscroll.extensions import db
from cyberscroll.models import User, Article, ContactMessage, AuditLog, DEFAULT_PREFERENCES
from cyberscroll.services.article_service import ArticleService
from cyberscroll.services.export_service import ExportService
from cyberscroll.utils.audit import log_action
from cyberscroll.utils.file_helper import save_avatar
from cyberscroll.utils.pagination import paginate
from cyberscroll.utils.permissions import token_required, admin_required, current_claims
from cyberscroll.utils.validators import validate_uuid_param


def get_current_user():
    user = db.session.get(User, current_claims().user_id)
    if user is None:
        raise NotFound('User does not exist', error='User not found')
    return user


def text_or_none(value):
    return value.strip() if isinstance(value, str) else None


def merged_preferences(user, updates=None):
    preferences = dict(DEFAULT_PREFERENCES)
    preferences.update(user.preferences or {})
    preferences.update(updates or {})
    return preferences


# ==================== 个人资料 ====================

@users_bp.route('/profile')
@token_required
def get_profile():
    return jsonify({'user': get_current_user().to_dict()})


@users_bp.route('/profile', methods=['PUT'])
@token_required
def update_profile():
    user = get_current_user()
    form = ProfileForm().validate_or_raise()
    changes = form.supplied_data()

    if 'email' in changes:
        existing = User.find_by_email(changes['email'])
        if existing is not None and existing.id != user.id:
            raise ValidationError('Email is already in use', error='Update failed')
        user.email = changes['email'].lower()

    if 'name' in changes:
        user.name = changes['name']
    for attr in ('job_title', 'organization', 'bio'):
        if attr in changes:
            setattr(user, attr, changes[attr] or '')

    user.save()
    current_app.logger.info(f'个人资料已更新: {user.email}')
    return jsonify({'message': 'Profile updated successfully', 'user': user.to_dict()})


@users_bp.route('/preferences')
@token_required
def get_preferences():
    return jsonify({'preferences': merged_preferences(get_current_user())})


@users_bp.route('/preferences', methods=['PUT'])
@token_required
def update_preferences():
    """偏好设置合并写入（JSON 列需要整体赋值）"""
    user = get_current_user()
    form = PreferencesForm().validate_or_raise()

    user.preferences = merged_preferences(user, form.preferences.data)
    user.save()
    return jsonify({'message': 'Preferences updated successfully', 'preferences': user.preferences})


@users_bp.route('/avatar', methods=['POST'])
@token_required
def update_avatar():
    """头像：multipart 上传图片，或 JSON 提供 avatarUrl"""
    user = get_current_user()

    if 'avatar' in request.files:
        avatar_url = save_avatar(request.files['avatar'])
    else:
        avatar_url = AvatarForm().validate_or_raise().avatar_url.data

    user.avatar_url = avatar_url
    user.save()
    return jsonify({'message': 'Avatar updated successfully', 'avatarUrl': avatar_url, 'user': user.to_dict()})


# ==================== 数据导入导出 ====================

@users_bp.route('/export', methods=['POST'])
@token_required
def export_data():
    user = get_current_user()
    form = ExportForm().validate_or_raise()
    options = form.supplied_data()

    log_action('users', 'export_data', {'format': form.format.data or 'json'})

    if form.format.data == 'csv':
        output = ExportService.export_articles_csv(user)
        filename = f"articles_{datetime.now().strftime('%Y%m%d%H%M%S')}.csv"
        return send_file(output, mimetype='text/csv', as_attachment=True, download_name=filename)

    payload = ExportService.build_user_export(
        user,
        include_documents=options.get('include_documents', True),
        include_settings=options.get('include_settings', True),
    )
    return jsonify({'message': 'Export completed successfully', 'data': payload})


@users_bp.route('/import', methods=['POST'])
@token_required
def import_data():
    """
    导入数据：
    - preferences 合并到现有偏好
    - articles 逐条校验，作为私有草稿创建；无效条目跳过并计数
    """
    user = get_current_user()
    data = ImportForm().validate_or_raise().import_data.data

    imported = {'preferences': False, 'articles': 0, 'skipped': 0}

    preferences = data.get('preferences')
    if isinstance(preferences, dict):
        user.preferences = merged_preferences(user, preferences)
        imported['preferences'] = True

    for item in data.get('articles') or []:
        if not isinstance(item, dict):
            imported['skipped'] += 1
            continue
        form = ArticleForm(formdata=None, data={
            'title': text_or_none(item.get('title')),
            'content': text_or_none(item.get('content')),
            'excerpt': text_or_none(item.get('excerpt')),
            'tags': [t.strip() for t in item.get('tags') or [] if isinstance(t, str) and t.strip()],
        })
        if not form.validate():
            imported['skipped'] += 1
            continue

        article = Article(
            author_id=user.id,
            title=form.title.data,
            content=form.content.data,
            excerpt=form.excerpt.data or ArticleService.make_excerpt(form.content.data),
            tags=form.tags.data,
            visibility=Article.VISIBILITY_PRIVATE,
            status=Article.STATUS_DRAFT,
        )
        ArticleService.sync_category_usage([], article.tags)
        db.session.add(article)
        imported['articles'] += 1

    db.session.commit()
    log_action('users', 'import_data', imported)
    return jsonify({'message': 'Import completed successfully', 'imported': imported})


@users_bp.route('/account', methods=['DELETE'])
@token_required
def delete_account():
    form = DeleteAccountForm().validate_or_raise()
    user = get_current_user()

    if not user.verify_password(form.password.data):
        raise ValidationError('Invalid password', error='Account deletion failed')

    email = user.email
    user.delete()
    log_action('users', 'delete_account', {'email': email})
    current_app.logger.info(f'账户已删除: {email}')
    return jsonify({'message': 'Account deleted successfully'})


# ==================== 管理员 ====================

@users_bp.route('/')
@admin_required
def list_users():
    form = UserListForm.parse()
    page, limit = form.paging

    query = User.query
    if form.search.data:
        like = f'%{form.search.data}%'
        query = query.filter(or_(User.name.ilike(like), User.email.ilike(like), User.job_title.ilike(like)))

    order = User.created_at.desc() if form.descending else User.created_at.asc()
    users, pagination = paginate(query.order_by(order, User.id), page, limit)
    return jsonify({'users': [u.to_dict() for u in users], 'pagination': pagination})


@users_bp.route('/messages')
@admin_required
def list_messages():
    """联系表单留言"""
    form = MessageListForm.parse()
    page, limit = form.paging

    query = ContactMessage.query
    if form.status.data:
        query = query.filter_by(status=form.status.data)

    messages, pagination = paginate(query.order_by(ContactMessage.created_at.desc()), page, limit)
    return jsonify({
        'messages': [m.to_dict() for m in messages],
        'unread': ContactMessage.query.filter_by(status=ContactMessage.STATUS_UNREAD).count(),
        'pagination': pagination,
    })


@users_bp.route('/messages/<message_id>/read', methods=['PUT'])
@admin_required
def mark_message_read(message_id):
    validate_uuid_param(message_id)
    message = db.session.get(ContactMessage, message_id)
    if message is None:
        raise NotFound('Message does not exist', error='Message not found')

    message.status = ContactMessage.STATUS_READ
    message.save()
    return jsonify({'message': 'Message marked as read', 'contactMessage': message.to_dict()})


@users_bp.route('/audit-logs')
@admin_required
def list_audit_logs():
    form = AuditLogListForm.parse()
    page, limit = form.paging

    query = AuditLog.query
    if form.module.data:
        query = query.filter_by(module=form.module.data)

    logs, pagination = paginate(query.order_by(AuditLog.created_at.desc()), page, limit)
    return jsonify({'logs': [log.to_dict() for log in logs], 'pagination': pagination})


@users_bp.route('/<user_id>')
@admin_required
def get_user(user_id):
    validate_uuid_param(user_id)
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound('User does not exist', error='User not found')
    return jsonify({'user': user.to_dict()})
