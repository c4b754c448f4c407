from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text

from utils.security import hash_password


class Account(BaseModel, Base):
    __tablename__ = "accounts"
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(512), nullable=True)
    cover_image = Column(String(512), nullable=True)
    password_hash = Column(String(255), nullable=False)
    # written only through models.session_record.SessionRecord
    refresh_token = Column(Text, nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @password.setter
    def password(self, value: str):
        self.password_hash = hash_password(value)
