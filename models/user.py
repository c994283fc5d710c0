# -*- coding: utf-8 -*-
"""
user.py
--------------------------------------------------------------------
测试人员实体。
说明：
- name 唯一且区分大小写，入库前去除首尾空白。
- 删除用户时其全部测试结果级联删除（外键 ON DELETE CASCADE）。
- “当前测试人员”只是会话内的选择，不在此表中记录。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS, exact_string
from utils.datetime_helpers import datetime_to_iso


class User(TimestampMixin, db.Model):
    __tablename__ = "user"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(exact_string(100), unique=True, nullable=False, index=True)

    results = db.relationship(
        "TestResult",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User id={self.id} name={self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": datetime_to_iso(self.created_at),
            "updatedAt": datetime_to_iso(self.updated_at),
        }
