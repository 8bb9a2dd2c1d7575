from wtforms.validators import DataRequired, Length, Email, Optional

from cyberscroll.utils.forms import ApiForm, ListQueryForm, TextField


class PublicArticleListForm(ListQueryForm):
    category = TextField(validators=[Optional(), Length(max=50)])


class CommentForm(ApiForm):
    """访客评论"""
    author = TextField(validators=[
        DataRequired(message="Author, email, and content are required"),
        Length(min=2, max=100, message="Author must be between 2 and 100 characters")
    ])
    email = TextField(validators=[
        DataRequired(message="Author, email, and content are required"),
        Email(message="Invalid email address")
    ])
    content = TextField(validators=[
        DataRequired(message="Author, email, and content are required"),
        Length(min=1, max=1000, message="Comment must be between 1 and 1000 characters")
    ])


class LikeForm(ApiForm):
    visitor_id = TextField(name='visitorId', validators=[
        DataRequired(message="Visitor ID is required"), Length(max=128)
    ])


class ShareForm(ApiForm):
    platform = TextField(validators=[
        DataRequired(message="Platform and visitor ID are required"), Length(max=50)
    ])
    visitor_id = TextField(name='visitorId', validators=[
        DataRequired(message="Platform and visitor ID are required"), Length(max=128)
    ])


class ContactForm(ApiForm):
    """联系表单"""
    name = TextField(validators=[
        DataRequired(message="Name, email, subject, and message are required"), Length(max=100)
    ])
    email = TextField(validators=[
        DataRequired(message="Name, email, subject, and message are required"),
        Email(message="Invalid email address")
    ])
    subject = TextField(validators=[
        DataRequired(message="Name, email, subject, and message are required"), Length(max=200)
    ])
    message = TextField(validators=[
        DataRequired(message="Name, email, subject, and message are required"), Length(max=5000)
    ])
