"""Article comments, threaded one level deep."""

from sqlalchemy import Column, String, Boolean, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base, new_id, utcnow


class ArticleComment(Base):
    """Comment on an article, or a reply to a top-level comment."""

    __tablename__ = "article_comments"

    id = Column(String(36), primary_key=True, default=new_id)
    article_id = Column(String(36), ForeignKey("articles.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    parent_id = Column(String(36), ForeignKey("article_comments.id"), index=True)

    content = Column(Text, nullable=False)
    position = Column(JSON)  # {"start": int, "end": int} within the article body
    resolved = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow, index=True)

    article = relationship("Article", back_populates="comments")
    author = relationship("Profile")
    replies = relationship(
        "ArticleComment",
        cascade="all, delete-orphan",
        order_by="ArticleComment.created_at",
    )

    def __repr__(self):
        return f"<ArticleComment(id={self.id}, article_id={self.article_id}, resolved={self.resolved})>"
