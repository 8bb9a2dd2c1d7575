from flask import jsonify, current_app
from sqlalchemy import or_

from cyberscroll.blueprints.categories import categories_bp
from cyberscroll.blueprints.categories.forms import (CategoryForm, CategoryUpdateForm, CategoryListForm,
                                                     PopularQueryForm, MergeForm)
from cyberscroll.exceptions import ValidationError, NotFound
from cyberscroll.extensions import db
from cyberscroll.models import Category
from cyberscroll.utils.permissions import token_required, admin_required
from cyberscroll.utils.pagination import apply_sort
from cyberscroll.utils.validators import validate_uuid_param


def get_category_or_404(category_id):
    validate_uuid_param(category_id)
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFound('Category does not exist', error='Category not found')
    return category


def ensure_unique_name(name, exclude_id=None):
    """分类名称大小写不敏感唯一"""
    existing = Category.find_by_name(name)
    if existing is not None and existing.id != exclude_id:
        raise ValidationError('Category with this name already exists', error='Category already exists')


@categories_bp.route('/')
@token_required
def list_categories():
    form = CategoryListForm.parse()
    query = Category.query

    if form.search.data:
        like = f'%{form.search.data}%'
        query = query.filter(or_(Category.name.ilike(like), Category.description.ilike(like)))

    query = apply_sort(query, Category, form.sort_by.data or 'usageCount',
                       form.descending, CategoryListForm.SORT_COLUMNS)
    categories = query.all()
    return jsonify({'categories': [c.to_dict() for c in categories], 'total': len(categories)})


@categories_bp.route('/stats/overview')
@token_required
def stats_overview():
    categories = Category.query.all()
    total_usage = sum(c.usage_count or 0 for c in categories)
    most_used = max(categories, key=lambda c: c.usage_count or 0, default=None)
    recently_updated = sorted(categories, key=lambda c: c.updated_at, reverse=True)[:5]

    return jsonify({'stats': {
        'total': len(categories),
        'totalUsage': total_usage,
        'averageUsage': round(total_usage / len(categories)) if categories else 0,
        'mostUsed': most_used.to_dict() if most_used else None,
        'recentlyUpdated': [c.to_dict() for c in recently_updated],
    }})


@categories_bp.route('/popular')
@token_required
def popular():
    form = PopularQueryForm.parse()
    categories = (Category.query
                  .order_by(Category.usage_count.desc(), Category.name)
                  .limit(form.limit.data or 10)
                  .all())
    return jsonify({'categories': [c.to_dict() for c in categories]})


@categories_bp.route('/<category_id>')
@token_required
def get_category(category_id):
    return jsonify({'category': get_category_or_404(category_id).to_dict()})


@categories_bp.route('/', methods=['POST'])
@admin_required
def create_category():
    form = CategoryForm().validate_or_raise()
    ensure_unique_name(form.name.data)

    category = Category(
        name=form.name.data,
        description=form.description.data or '',
        color=form.color.data or Category.DEFAULT_COLOR,
        usage_count=0,
    )
    category.save()

    current_app.logger.info(f'分类已创建: {category.name}')
    return jsonify({'message': 'Category created successfully', 'category': category.to_dict()}), 201


@categories_bp.route('/<category_id>', methods=['PUT'])
@admin_required
def update_category(category_id):
    category = get_category_or_404(category_id)
    form = CategoryUpdateForm().validate_or_raise()
    changes = form.supplied_data()

    if 'name' in changes:
        ensure_unique_name(changes['name'], exclude_id=category.id)
        category.name = changes['name']
    if 'description' in changes:
        category.description = changes['description'] or ''
    if 'color' in changes:
        category.color = changes['color']

    category.save()
    return jsonify({'message': 'Category updated successfully', 'category': category.to_dict()})


@categories_bp.route('/<category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    """使用中的分类不允许删除"""
    category = get_category_or_404(category_id)
    if (category.usage_count or 0) > 0:
        raise ValidationError('Cannot delete category that is currently in use',
                              error='Category in use', payload={'usageCount': category.usage_count})

    category.delete()
    current_app.logger.info(f'分类已删除: {category_id}')
    return jsonify({'message': 'Category deleted successfully'})


@categories_bp.route('/merge', methods=['POST'])
@admin_required
def merge_categories():
    """源分类的使用次数并入目标分类，然后删除源分类"""
    form = MergeForm().validate_or_raise()
    source = db.session.get(Category, form.source_id.data)
    target = db.session.get(Category, form.target_id.data)

    if source is None or target is None:
        raise NotFound('One or both categories do not exist', error='Category not found')
    if source.id == target.id:
        raise ValidationError('Cannot merge a category with itself', error='Merge failed')

    target.usage_count = (target.usage_count or 0) + (source.usage_count or 0)
    db.session.delete(source)
    db.session.commit()

    current_app.logger.info(f'分类已合并: {form.source_id.data} -> {target.name}')
    return jsonify({'message': 'Categories merged successfully', 'targetCategory': target.to_dict()})
