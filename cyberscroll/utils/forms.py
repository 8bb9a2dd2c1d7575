"""
JSON 请求校验基础设施
FlaskForm 在 JSON 请求时会自动把 request.get_json() 包装成 formdata，
这里补充 JSON 友好的字段类型与统一的错误出口。
"""
import json

from flask import request
from flask_wtf import FlaskForm
from wtforms import Field, StringField, IntegerField
from wtforms.validators import Optional, NumberRange, AnyOf, StopValidation

from cyberscroll.exceptions import ValidationError


class TextField(StringField):
    """只接受字符串的文本字段（自动去除首尾空白）"""
    strip = True

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if value is None:
            self.data = None
        elif isinstance(value, str):
            self.data = value.strip() if self.strip else value
        else:
            self.data = None
            raise ValueError(self.gettext('Not a valid string value.'))


class SecretField(TextField):
    """密码类字段，原样保留首尾空白"""
    strip = False


class TagListField(Field):
    """
    标签列表字段
    JSON 数组在 formdata 中会展开为多值；multipart 表单中也接受 JSON 字符串 '["a","b"]'
    """

    def _value(self):
        return ', '.join(self.data or [])

    def process_data(self, value):
        self.data = list(value) if value else []

    def process_formdata(self, valuelist):
        if len(valuelist) == 1 and isinstance(valuelist[0], str) and valuelist[0].lstrip().startswith('['):
            try:
                valuelist = json.loads(valuelist[0])
            except ValueError:
                raise ValueError(self.gettext('Not a valid tag list.'))
            if not isinstance(valuelist, list):
                raise ValueError(self.gettext('Not a valid tag list.'))

        tags = []
        for item in valuelist:
            if item is None:
                continue
            if not isinstance(item, str):
                raise ValueError(self.gettext('Tags must be strings.'))
            item = item.strip()
            if item and item not in tags:
                tags.append(item)
        self.data = tags


class JSONDictField(Field):
    """嵌套对象字段（如用户偏好设置）"""

    def process_data(self, value):
        self.data = dict(value) if value else {}

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if not isinstance(value, dict):
            self.data = {}
            raise ValueError(self.gettext('Must be a JSON object.'))
        self.data = value


class ApiForm(FlaskForm):
    """JSON API 表单基类"""

    class Meta:
        csrf = False

    def __init__(self, *args, **kwargs):
        if 'formdata' not in kwargs and request.is_json:
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                raise ValidationError('Request body must be a JSON object')
        super().__init__(*args, **kwargs)

    def first_error(self):
        for attr, errors in self.errors.items():
            if not errors:
                continue
            field = self._fields.get(attr)
            label = field.name if field is not None else 'form'
            message = errors[0]
            if isinstance(message, (list, tuple)):
                message = message[0]
            return f'{label}: {message}'
        return 'Invalid data'

    def validate_or_raise(self):
        """校验失败时抛出 ValidationError (400)"""
        if not self.validate():
            raise ValidationError(self.first_error(), payload={'errors': self.errors})
        return self

    def supplied_data(self):
        """
        只返回请求中实际出现的字段 {属性名: 值}，用于 PUT 部分更新
        """
        if request.is_json:
            source = request.get_json(silent=True) or {}
        else:
            source = request.form
        return {
            attr: field.data
            for attr, field in self._fields.items()
            if field.name in source
        }


class Supplied:
    """
    部分更新：字段未出现在请求中时跳过后续校验；
    出现时继续校验（空字符串会被后续的 Length 等拦截）
    """
    field_flags = {'optional': True}

    def __call__(self, form, field):
        if not field.raw_data:
            field.errors[:] = []
            raise StopValidation()


class QueryForm(ApiForm):
    """查询字符串参数"""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('formdata', request.args)
        super().__init__(*args, **kwargs)

    @classmethod
    def parse(cls):
        return cls().validate_or_raise()


class ListQueryForm(QueryForm):
    """列表查询参数：分页 + 排序"""
    page = IntegerField(default=1, validators=[Optional(), NumberRange(min=1)])
    limit = IntegerField(default=10, validators=[Optional(), NumberRange(min=1, max=100)])
    sort_order = TextField(name='sortOrder', default='desc',
                           validators=[Optional(), AnyOf(('asc', 'desc'))])
    search = TextField(validators=[Optional()])

    @property
    def paging(self):
        """(page, limit)，参数为空时取默认值"""
        return self.page.data or 1, self.limit.data or 10

    @property
    def descending(self):
        return self.sort_order.data != 'asc'
