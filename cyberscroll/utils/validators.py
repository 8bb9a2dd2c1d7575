"""
表单验证器
"""
import re
import uuid

from wtforms.validators import ValidationError as FieldValidationError

from cyberscroll.exceptions import ValidationError
from cyberscroll.utils.security import check_password_strength

HEX_COLOR_RE = re.compile(r'^#[0-9a-fA-F]{6}$')


def is_valid_uuid(value):
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def validate_uuid_param(value, name='id'):
    """校验 URL 中的 ID 参数，格式错误返回 400"""
    if not is_valid_uuid(value):
        raise ValidationError(f'{name}: Invalid UUID format')
    return value


def validate_hex_color(form, field):
    """验证十六进制颜色 #rrggbb"""
    if field.data and not HEX_COLOR_RE.match(field.data):
        raise FieldValidationError('Color must be a hex value like #3b82f6')


def validate_optional_uuid(form, field):
    """允许为空的 UUID 字段"""
    if field.data and not is_valid_uuid(field.data):
        raise FieldValidationError('Invalid UUID format')


def validate_password_strength(form, field):
    """密码强度：至少 8 位，包含大小写字母、数字和特殊字符"""
    if field.data:
        ok, message = check_password_strength(field.data)
        if not ok:
            raise FieldValidationError(message)


def validate_tag_items(min_length=2, max_length=50, max_items=10):
    """标签列表：数量上限与单个标签长度"""
    def _validate(form, field):
        tags = field.data or []
        if len(tags) > max_items:
            raise FieldValidationError(f'At most {max_items} tags are allowed')
        for tag in tags:
            if not min_length <= len(tag) <= max_length:
                raise FieldValidationError(
                    f'Each tag must be between {min_length} and {max_length} characters')
    return _validate
