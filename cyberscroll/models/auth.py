from werkzeug.security import generate_password_hash, check_password_hash
from cyberscroll.extensions import db
from .base import BaseModel

ADMIN_USER_ID = '550e8400-e29b-41d4-a716-446655440000'

DEFAULT_PREFERENCES = {
    'theme': 'light',
    'emailNotifications': True,
    'browserNotifications': False,
    'defaultPostVisibility': 'private',
    'analytics': True,
}


class User(BaseModel):
    """博客用户"""
    __tablename__ = 'auth_users'
    __hidden_fields__ = ('password_hash',)

    ROLE_USER = 'user'
    ROLE_ADMIN = 'admin'
    ROLES = (ROLE_USER, ROLE_ADMIN)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(128), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.String(16), default=ROLE_USER, nullable=False)

    # 个人信息
    job_title = db.Column(db.String(100), default='')
    organization = db.Column(db.String(100), default='')
    bio = db.Column(db.Text, default='')
    avatar_url = db.Column(db.String(512))
    preferences = db.Column(db.JSON, default=lambda: dict(DEFAULT_PREFERENCES))

    @property
    def password(self):
        raise AttributeError('password is not a readable attribute')

    @password.setter
    def password(self, password):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @classmethod
    def find_by_email(cls, email):
        if not email:
            return None
        return cls.query.filter(db.func.lower(cls.email) == email.strip().lower()).first()

    def __repr__(self):
        return f'<User {self.email}>'
