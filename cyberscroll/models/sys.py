import json
from cyberscroll.extensions import db
from .base import BaseModel


class AuditLog(BaseModel):
    """系统操作审计"""
    __tablename__ = 'sys_audit_logs'

    user_id = db.Column(db.String(36), nullable=True, index=True)
    module = db.Column(db.String(32), index=True)  # e.g., 'auth', 'articles'
    action = db.Column(db.String(64))  # e.g., 'admin_login_failed', 'delete_article'
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(256))
    details = db.Column(db.Text)  # JSON 详情

    def to_dict(self):
        data = super().to_dict()
        data['details'] = json.loads(self.details) if self.details else None
        return data
