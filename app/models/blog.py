from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Uuid, JSON
from app.database import Base
import uuid


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    excerpt = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)  # ordered, duplicates kept
    image_url = Column(String(500))
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    author_name = Column(String(200), nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
