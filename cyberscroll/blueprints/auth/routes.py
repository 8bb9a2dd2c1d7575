import hmac

from flask import jsonify, current_app

from cyberscroll.blueprints.auth import auth_bp
from cyberscroll.blueprints.auth.forms import LoginForm, RegisterForm, ChangePasswordForm, AdminKeyForm
from cyberscroll.exceptions import (CyberScrollException, ValidationError,
                                    AuthenticationError, NotFound)
from cyberscroll.extensions import db
from cyberscroll.models import User, AuditLog, ADMIN_USER_ID
from cyberscroll.utils.audit import log_action, audit_log
from cyberscroll.utils.permissions import token_required, admin_required, current_claims
from cyberscroll.utils.security import rate_limit
from cyberscroll.utils.tokens import generate_token

ADMIN_LOGIN_ACTIONS = ('admin_login_success', 'admin_login_failed')


def current_user_or_404():
    user = db.session.get(User, current_claims().user_id)
    if user is None:
        raise NotFound('User not found')
    return user


def find_admin_user():
    return db.session.get(User, ADMIN_USER_ID) or User.query.filter_by(role=User.ROLE_ADMIN).first()


def check_admin_key(action):
    """
    校验 adminKey，每次尝试都写入审计日志
    :param action: 'admin_login' / 'verify_admin_key'
    """
    form = AdminKeyForm()
    if not form.validate():
        log_action('auth', f'{action}_failed', {'reason': 'missing admin key'})
        raise ValidationError(form.first_error(), payload={'errors': form.errors})

    expected = current_app.config['ADMIN_KEY']
    if not hmac.compare_digest(form.admin_key.data.encode(), expected.encode()):
        log_action('auth', f'{action}_failed', {'reason': 'invalid admin key'})
        current_app.logger.warning(f'{action}: 管理员密钥错误')
        raise AuthenticationError('Invalid admin key', error='Access denied')


@auth_bp.route('/register', methods=['POST'])
@rate_limit()
def register():
    """用户注册"""
    form = RegisterForm().validate_or_raise()

    if User.find_by_email(form.email.data):
        raise ValidationError('User already exists with this email', error='Registration failed')

    user = User(
        name=form.name.data,
        email=form.email.data.lower(),
        role=User.ROLE_USER,
        job_title=form.job_title.data or '',
        organization=form.organization.data or '',
        bio=form.bio.data or '',
    )
    user.password = form.password.data
    user.save()

    current_app.logger.info(f'新用户注册: {user.email}')
    return jsonify({
        'message': 'User registered successfully',
        'user': user.to_dict(),
        'token': generate_token(user),
    }), 201


@auth_bp.route('/login', methods=['POST'])
@rate_limit()
def login():
    """用户登录"""
    form = LoginForm().validate_or_raise()

    user = User.find_by_email(form.email.data)
    if user is None or not user.verify_password(form.password.data):
        current_app.logger.warning(f'登录失败: {form.email.data}')
        raise AuthenticationError('Invalid email or password', error='Login failed')

    return jsonify({
        'message': 'Login successful',
        'user': user.to_dict(),
        'token': generate_token(user),
    })


@auth_bp.route('/me')
@token_required
def me():
    return jsonify({'user': current_user_or_404().to_dict()})


@auth_bp.route('/change-password', methods=['POST'])
@token_required
def change_password():
    """修改密码"""
    form = ChangePasswordForm().validate_or_raise()
    user = current_user_or_404()

    if not user.verify_password(form.current_password.data):
        raise ValidationError('Current password is incorrect', error='Password change failed')

    user.password = form.new_password.data
    user.save()
    log_action('auth', 'change_password')
    return jsonify({'message': 'Password changed successfully'})


@auth_bp.route('/refresh', methods=['POST'])
@token_required
def refresh():
    """刷新令牌"""
    user = current_user_or_404()
    return jsonify({'message': 'Token refreshed successfully', 'token': generate_token(user)})


@auth_bp.route('/logout', methods=['POST'])
@token_required
@audit_log('auth', 'logout')
def logout():
    """令牌无状态，登出只做记录"""
    return jsonify({'message': 'Logged out successfully'})


@auth_bp.route('/admin-login', methods=['POST'])
@rate_limit()
def admin_login():
    """管理员密钥登录，返回带 admin 角色的令牌"""
    check_admin_key('admin_login')

    admin = find_admin_user()
    if admin is None:
        log_action('auth', 'admin_login_failed', {'reason': 'admin user not found'})
        raise CyberScrollException('Admin user not found', code=500, error='Server error')

    log_action('auth', 'admin_login_success', {'email': admin.email}, user_id=admin.id)
    current_app.logger.info(f'管理员登录: {admin.email}')
    return jsonify({
        'message': 'Admin login successful',
        'user': admin.to_dict(),
        'token': generate_token(admin),
    })


@auth_bp.route('/verify-admin-key', methods=['POST'])
@rate_limit()
def verify_admin_key():
    check_admin_key('verify_admin_key')
    log_action('auth', 'verify_admin_key_success')
    return jsonify({'valid': True, 'message': 'Admin key verified'})


@auth_bp.route('/admin-access-log')
@admin_required
def admin_access_log():
    """最近 50 条管理员登录记录"""
    logs = (AuditLog.query
            .filter(AuditLog.module == 'auth', AuditLog.action.in_(ADMIN_LOGIN_ACTIONS))
            .order_by(AuditLog.created_at.desc())
            .limit(50)
            .all())
    return jsonify({'logs': [log.to_dict() for log in logs], 'total': len(logs)})
