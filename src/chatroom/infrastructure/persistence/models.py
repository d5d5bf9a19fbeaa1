"""SQLModel table definitions."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class ParticipantModel(SQLModel, table=True):
    """在室ユーザーテーブル

    name の一意制約が入室時の条件付き挿入を担う。
    """

    __tablename__ = "participants"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    last_seen: float  # モノトニック時刻（秒）


class MessageModel(SQLModel, table=True):
    """メッセージテーブル

    sequence は AUTOINCREMENT のため削除後も再利用されない。
    """

    __tablename__ = "messages"
    __table_args__ = {"sqlite_autoincrement": True}

    sequence: int | None = Field(default=None, primary_key=True)
    sender: str = Field(index=True)
    recipient: str = Field(index=True)
    text: str
    type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
