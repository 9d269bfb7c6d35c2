from sqlalchemy import Column, String, Boolean, DateTime, Text, Uuid, Enum as SQLEnum
from app.database import Base
from app.core.permissions import Role
import uuid


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    fullname = Column(String(200), nullable=False)
    role = Column(SQLEnum(Role, values_callable=lambda e: [m.value for m in e]), default=Role.CUSTOMER, nullable=False)
    bio = Column(Text)
    avatar_url = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    last_login = Column(DateTime)
