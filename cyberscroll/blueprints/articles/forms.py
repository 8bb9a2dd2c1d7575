from wtforms.validators import DataRequired, Length, Optional, AnyOf

from cyberscroll.models import Article, Comment
from cyberscroll.utils.forms import ApiForm, ListQueryForm, TextField, TagListField, Supplied
from cyberscroll.utils.validators import validate_tag_items


class ArticleForm(ApiForm):
    """新建文章"""
    title = TextField(validators=[
        DataRequired(message="Title is required"),
        Length(min=3, max=200, message="Title must be between 3 and 200 characters")
    ])
    content = TextField(validators=[
        DataRequired(message="Content is required"),
        Length(min=10, message="Content must be at least 10 characters")
    ])
    excerpt = TextField(validators=[Optional(), Length(max=500)])
    tags = TagListField(validators=[validate_tag_items()])
    visibility = TextField(default=Article.VISIBILITY_PRIVATE, validators=[
        Optional(), AnyOf(Article.VISIBILITIES)
    ])
    status = TextField(default=Article.STATUS_DRAFT, validators=[
        Optional(), AnyOf(Article.STATUSES)
    ])


class ArticleUpdateForm(ApiForm):
    """编辑文章（只校验请求中出现的字段）"""
    title = TextField(validators=[
        Supplied(), Length(min=3, max=200, message="Title must be between 3 and 200 characters")
    ])
    content = TextField(validators=[
        Supplied(), Length(min=10, message="Content must be at least 10 characters")
    ])
    excerpt = TextField(validators=[Optional(), Length(max=500)])
    tags = TagListField(validators=[validate_tag_items()])
    visibility = TextField(validators=[Supplied(), AnyOf(Article.VISIBILITIES)])
    status = TextField(validators=[Supplied(), AnyOf(Article.STATUSES)])


class ArticleListForm(ListQueryForm):
    SORT_COLUMNS = {
        'createdAt': 'created_at',
        'updatedAt': 'updated_at',
        'title': 'title',
        'views': 'views',
        'likeCount': 'like_count',
    }

    status = TextField(validators=[Optional(), AnyOf(Article.STATUSES)])
    visibility = TextField(validators=[Optional(), AnyOf(Article.VISIBILITIES)])
    tag = TextField(validators=[Optional()])
    author_id = TextField(name='authorId', validators=[Optional()])
    sort_by = TextField(name='sortBy', default='createdAt', validators=[
        Optional(), AnyOf(tuple(SORT_COLUMNS))
    ])


class CommentStatusForm(ApiForm):
    status = TextField(validators=[
        DataRequired(message="Status is required"), AnyOf(Comment.STATUSES)
    ])
