"""
JWT 令牌工具
签发、解析与声明(claims)校验：
令牌缺失/存在 -> 有效/过期/格式错误 -> 声明结构校验 -> 挂到请求上或以 401 拒绝
"""
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app, request
from wtforms import Form, StringField, IntegerField
from wtforms.validators import DataRequired, Email, AnyOf, UUID

from cyberscroll.exceptions import AuthenticationError
from cyberscroll.models.auth import User


class ClaimsForm(Form):
    """令牌声明结构"""
    user_id = StringField(validators=[DataRequired(), UUID()])
    email = StringField(validators=[DataRequired(), Email()])
    role = StringField(validators=[DataRequired(), AnyOf(User.ROLES)])
    iat = IntegerField(validators=[DataRequired()])
    exp = IntegerField(validators=[DataRequired()])


class TokenClaims:
    """已校验的令牌声明，作为请求级别的当前用户"""

    def __init__(self, user_id, email, role, iat, exp):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.iat = iat
        self.exp = exp

    @property
    def is_admin(self):
        return self.role == User.ROLE_ADMIN

    def to_dict(self):
        return {
            'userId': self.user_id,
            'email': self.email,
            'role': self.role,
            'iat': self.iat,
            'exp': self.exp,
        }

    def __repr__(self):
        return f'<TokenClaims {self.email} ({self.role})>'


def generate_token(user):
    """为用户签发访问令牌（默认 7 天有效）"""
    now = datetime.now(timezone.utc)
    payload = {
        'userId': user.id,
        'email': user.email,
        'role': user.role,
        'iat': now,
        'exp': now + timedelta(days=current_app.config['JWT_EXPIRES_DAYS']),
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config['JWT_ALGORITHM'],
    )


def decode_token(token):
    """校验签名和有效期，返回原始 payload（失败时抛出 PyJWT 异常）"""
    return jwt.decode(
        token,
        current_app.config['JWT_SECRET'],
        algorithms=[current_app.config['JWT_ALGORITHM']],
        options={'require': ['exp', 'iat']},
    )


def _as_str(value):
    return None if value is None else str(value)


def validate_claims(payload):
    """按声明结构校验 payload，返回 TokenClaims"""
    if not isinstance(payload, dict):
        raise AuthenticationError('Invalid token format', error='Authentication failed')

    form = ClaimsForm(
        user_id=_as_str(payload.get('userId')),
        email=_as_str(payload.get('email')),
        role=_as_str(payload.get('role')),
        iat=payload.get('iat'),
        exp=payload.get('exp'),
    )
    if not form.validate():
        raise AuthenticationError('Invalid token format', error='Authentication failed',
                                  payload={'errors': form.errors})

    return TokenClaims(
        user_id=form.user_id.data,
        email=form.email.data,
        role=form.role.data,
        iat=form.iat.data,
        exp=form.exp.data,
    )


def extract_bearer_token():
    """从 Authorization: Bearer <token> 头中取出令牌"""
    header = request.headers.get('Authorization', '')
    parts = header.split()
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1]
    return None


def authenticate_request():
    """
    解析当前请求的令牌
    :return: TokenClaims
    :raises AuthenticationError: 令牌缺失、过期、无效或声明不合法
    """
    token = extract_bearer_token()
    if not token:
        raise AuthenticationError('No token provided', error='Access denied')

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Please login again', error='Token expired')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Token is not valid', error='Invalid token')

    return validate_claims(payload)
