"""SQLite implementation of MessageStore."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlalchemy import insert, literal
from sqlalchemy import select as sa_select
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from chatroom.domain.entities import Message, MessageType
from chatroom.domain.exceptions import NotFoundError
from chatroom.domain.services import (
    parse_message_type,
    require_positive_int,
    require_text,
)
from chatroom.infrastructure.persistence.exceptions import database_errors
from chatroom.infrastructure.persistence.models import MessageModel, ParticipantModel


def _as_utc(dt: datetime) -> datetime:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class SQLiteMessageStore:
    """SQLite 版 MessageStore 実装

    シーケンス番号は messages テーブルの AUTOINCREMENT 主キーをそのまま使う。
    SQLite の書き込みロックにより、並行する追記が同じ番号を得ることはない。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def append(self, message: Message, *, trusted: bool = False) -> int:
        """メッセージを追記する

        検証はデータベースに触れる前に行う。

        Args:
            message: 追記するメッセージ
            trusted: 内部呼び出し元からの追記か

        Returns:
            割り当てられたシーケンス番号

        Raises:
            ValidationError: to / text が空、または type が不正
        """
        require_text(message.to, "to")
        require_text(message.text, "text")
        parse_message_type(message.type, trusted=trusted)

        model = self._to_model(message)
        with database_errors("append"):
            async with self._session_factory() as session:
                session.add(model)
                await session.commit()
        assert model.sequence is not None
        return model.sequence

    async def append_from_present(self, message: Message) -> int:
        """在室中の送信者からのメッセージを追記する

        送信者の在室確認と追記を INSERT ... SELECT ... WHERE EXISTS の
        1 文で行うため、確認後に退室処理が割り込むことはない。

        Args:
            message: 追記するメッセージ（status 型は不可）

        Returns:
            割り当てられたシーケンス番号

        Raises:
            ValidationError: to / text が空、または type が不正
            NotFoundError: 送信者が在室していない
        """
        require_text(message.to, "to")
        require_text(message.text, "text")
        message_type = parse_message_type(message.type)

        columns = MessageModel.__table__.c  # type: ignore[attr-defined]
        values = {
            "sender": message.sender,
            "recipient": message.to,
            "text": message.text,
            "type": message_type.value,
            "timestamp": message.timestamp,
        }
        sender_present = (
            sa_select(ParticipantModel.id)
            .where(ParticipantModel.name == message.sender)
            .exists()
        )
        source = sa_select(
            *(literal(value, type_=columns[key].type) for key, value in values.items())
        ).where(sender_present)
        statement = (
            insert(MessageModel)
            .from_select(list(values), source)
            .returning(MessageModel.sequence)
        )

        with database_errors("append_from_present"):
            async with self._session_factory() as session:
                result = await session.execute(statement)
                sequence = result.scalar_one_or_none()
                await session.commit()
        if sequence is None:
            raise NotFoundError(message.sender, "Invalid user")
        return sequence

    async def recent(self, limit: int) -> list[Message]:
        """最新のメッセージを取得する

        シーケンス降順で limit 件取得し、古い順に並べ替えて返す。

        Args:
            limit: 取得する最大件数（正の整数）

        Returns:
            メッセージリスト（古い順）

        Raises:
            ValidationError: limit が正の整数でない
        """
        limit = require_positive_int(limit, "limit")

        with database_errors("recent"):
            async with self._session_factory() as session:
                statement = (
                    select(MessageModel)
                    .order_by(MessageModel.sequence.desc())  # type: ignore[union-attr]
                    .limit(limit)
                )
                result = await session.exec(statement)
                models = result.all()
        return [self._to_entity(m) for m in reversed(models)]

    def _to_entity(self, model: MessageModel) -> Message:
        """モデルをエンティティに変換する

        Args:
            model: MessageModel インスタンス

        Returns:
            Message エンティティ
        """
        return Message(
            sender=model.sender,
            to=model.recipient,
            text=model.text,
            type=MessageType(model.type),
            timestamp=_as_utc(model.timestamp),
            sequence=model.sequence,
        )

    def _to_model(self, entity: Message) -> MessageModel:
        """エンティティをモデルに変換する

        Args:
            entity: Message エンティティ

        Returns:
            MessageModel インスタンス
        """
        return MessageModel(
            sender=entity.sender,
            recipient=entity.to,
            text=entity.text,
            type=MessageType(entity.type).value,
            timestamp=entity.timestamp,
        )
