from wtforms import IntegerField
from wtforms.validators import DataRequired, Length, Optional, AnyOf, NumberRange

from cyberscroll.models import Category
from cyberscroll.utils.forms import ApiForm, QueryForm, ListQueryForm, TextField, Supplied
from cyberscroll.utils.validators import validate_hex_color


class CategoryForm(ApiForm):
    """新建分类"""
    name = TextField(validators=[
        DataRequired(message="Name is required"),
        Length(min=2, max=50, message="Name must be between 2 and 50 characters")
    ])
    description = TextField(validators=[Optional(), Length(max=200)])
    color = TextField(default=Category.DEFAULT_COLOR, validators=[Optional(), validate_hex_color])


class CategoryUpdateForm(ApiForm):
    name = TextField(validators=[
        Supplied(), Length(min=2, max=50, message="Name must be between 2 and 50 characters")
    ])
    description = TextField(validators=[Optional(), Length(max=200)])
    color = TextField(validators=[Supplied(), validate_hex_color,
                                  Length(min=7, max=7, message="Color must be a hex value like #3b82f6")])


class CategoryListForm(ListQueryForm):
    SORT_COLUMNS = {
        'name': 'name',
        'usageCount': 'usage_count',
        'createdAt': 'created_at',
        'updatedAt': 'updated_at',
    }

    sort_by = TextField(name='sortBy', default='usageCount', validators=[
        Optional(), AnyOf(tuple(SORT_COLUMNS))
    ])


class PopularQueryForm(QueryForm):
    limit = IntegerField(default=10, validators=[Optional(), NumberRange(min=1, max=100)])


class MergeForm(ApiForm):
    """合并分类：source 合入 target"""
    source_id = TextField(name='sourceId', validators=[
        DataRequired(message="Source and target category IDs are required")
    ])
    target_id = TextField(name='targetId', validators=[
        DataRequired(message="Source and target category IDs are required")
    ])
