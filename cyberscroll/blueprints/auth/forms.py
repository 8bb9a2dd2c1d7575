from wtforms.validators import DataRequired, Length, Email, Optional

from cyberscroll.utils.forms import ApiForm, TextField, SecretField
from cyberscroll.utils.validators import validate_password_strength


class LoginForm(ApiForm):
    """用户登录"""
    email = TextField(validators=[
        DataRequired(message="Email is required"),
        Email(message="Invalid email address")
    ])
    password = SecretField(validators=[
        DataRequired(message="Password is required")
    ])


class RegisterForm(ApiForm):
    """用户注册"""
    name = TextField(validators=[
        DataRequired(message="Name is required"), Length(min=2, max=100)
    ])
    email = TextField(validators=[
        DataRequired(message="Email is required"),
        Email(message="Invalid email address")
    ])
    password = SecretField(validators=[
        DataRequired(message="Password is required"), validate_password_strength
    ])
    job_title = TextField(name='jobTitle', validators=[Optional(), Length(max=100)])
    organization = TextField(validators=[Optional(), Length(max=100)])
    bio = TextField(validators=[Optional(), Length(max=500)])


class ChangePasswordForm(ApiForm):
    current_password = SecretField(name='currentPassword', validators=[
        DataRequired(message="Current password is required")
    ])
    new_password = SecretField(name='newPassword', validators=[
        DataRequired(message="New password is required"), validate_password_strength
    ])


class AdminKeyForm(ApiForm):
    """管理员密钥"""
    admin_key = TextField(name='adminKey', validators=[
        DataRequired(message="Admin key is required")
    ])
