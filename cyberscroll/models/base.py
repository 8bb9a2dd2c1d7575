import re
import uuid
from datetime import datetime
from cyberscroll.extensions import db


def new_id():
    return str(uuid.uuid4())


def camelize(name):
    """created_at -> createdAt"""
    return re.sub(r'_([a-z])', lambda m: m.group(1).upper(), name)


class BaseModel(db.Model):
    """
    CyberScroll 模型基类
    包含：UUID 主键, 创建时间, 更新时间, 序列化方法
    """
    __abstract__ = True

    # 序列化时排除的列
    __hidden_fields__ = ()

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def save(self):
        """保存到数据库"""
        db.session.add(self)
        db.session.commit()
        return self

    def delete(self):
        """删除数据（内存库中直接物理删除）"""
        db.session.delete(self)
        db.session.commit()

    def to_dict(self):
        """
        通用序列化方法：将模型转换为字典，便于 API 返回 JSON。
        列名转换为 camelCase，过滤掉 __hidden_fields__ 中的列。
        """
        data = {}
        for c in self.__table__.columns:
            if c.name.startswith('_') or c.name in self.__hidden_fields__:
                continue
            val = getattr(self, c.name)
            if isinstance(val, datetime):
                data[camelize(c.name)] = val.isoformat()
            else:
                data[camelize(c.name)] = val
        return data
