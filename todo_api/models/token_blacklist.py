"""Blacklisted access token model."""

from sqlalchemy import Column, DateTime, Integer, Text, func

from todo_api.database import Base


class TokenBlacklist(Base):
    """Access tokens revoked by logout before their natural expiry.

    ``expires_at`` is copied from the token's own ``exp`` claim so that rows can be
    purged once the token would have expired anyway.
    """

    __tablename__ = "token_blacklist"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(Text, unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    blacklisted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<TokenBlacklist id={self.id} expires_at={self.expires_at}>"
