from wtforms import BooleanField
from wtforms.validators import DataRequired, Length, Email, Optional, AnyOf

from cyberscroll.models import ContactMessage
from cyberscroll.utils.forms import ApiForm, ListQueryForm, TextField, SecretField, JSONDictField, Supplied


class ProfileForm(ApiForm):
    """个人资料（部分更新）"""
    name = TextField(validators=[Supplied(), Length(min=2, max=100)])
    email = TextField(validators=[Supplied(), Email(message="Invalid email address")])
    job_title = TextField(name='jobTitle', validators=[Optional(), Length(max=100)])
    organization = TextField(validators=[Optional(), Length(max=100)])
    bio = TextField(validators=[Optional(), Length(max=500)])


class PreferencesForm(ApiForm):
    preferences = JSONDictField(validators=[DataRequired(message="Preferences are required")])


class AvatarForm(ApiForm):
    avatar_url = TextField(name='avatarUrl', validators=[
        DataRequired(message="Avatar URL is required"), Length(max=512)
    ])


class ExportForm(ApiForm):
    """数据导出选项"""
    format = TextField(default='json', validators=[Optional(), AnyOf(('json', 'csv'))])
    include_documents = BooleanField(name='includeDocuments')
    include_settings = BooleanField(name='includeSettings')


class ImportForm(ApiForm):
    import_data = JSONDictField(name='importData', validators=[
        DataRequired(message="Import data is required")
    ])


class DeleteAccountForm(ApiForm):
    password = SecretField(validators=[
        DataRequired(message="Password is required to delete account")
    ])


class UserListForm(ListQueryForm):
    pass


class MessageListForm(ListQueryForm):
    status = TextField(validators=[Optional(), AnyOf(ContactMessage.STATUSES)])


class AuditLogListForm(ListQueryForm):
    module = TextField(validators=[Optional(), Length(max=32)])
