from wtforms.validators import Optional, Length

from cyberscroll.utils.forms import ApiForm, ListQueryForm, TextField, TagListField
from cyberscroll.utils.validators import validate_tag_items, validate_optional_uuid


class DocumentMetaForm(ApiForm):
    """文件附加信息（上传时的表单字段，或 PUT 的 JSON）"""
    tags = TagListField(validators=[validate_tag_items(min_length=1)])
    linked_article_id = TextField(name='linkedArticleId', validators=[Optional(), validate_optional_uuid])
    description = TextField(validators=[Optional(), Length(max=500)])


class DocumentListForm(ListQueryForm):
    file_type = TextField(name='type', validators=[Optional(), Length(max=100)])
