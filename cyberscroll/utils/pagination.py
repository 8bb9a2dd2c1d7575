"""
分页与排序辅助
"""
import math

from cyberscroll.extensions import db


def pagination_meta(page, limit, total):
    return {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if limit else 0,
    }


def paginate(query, page=1, limit=10):
    """
    对查询分页
    :return: (当前页记录列表, 分页信息)
    """
    pagination = query.paginate(page=page, per_page=limit, error_out=False, count=True)
    return pagination.items, pagination_meta(page, limit, pagination.total or 0)


def paginate_list(items, page=1, limit=10):
    """对已在内存中过滤好的列表分页"""
    start = (page - 1) * limit
    return items[start:start + limit], pagination_meta(page, limit, len(items))


def apply_sort(query, model, sort_by, descending, columns):
    """
    按白名单排序
    :param columns: {请求参数名: 模型列名}，如 {'createdAt': 'created_at'}
    """
    column = getattr(model, columns[sort_by])
    if model.__table__.columns[columns[sort_by]].type.python_type is str:
        column = db.func.lower(column)
    ordered = column.desc() if descending else column.asc()
    return query.order_by(ordered, model.id)
