"""SQLite implementation of PresenceRegistry."""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from chatroom.domain.entities import User
from chatroom.domain.exceptions import ConflictError, NotFoundError
from chatroom.domain.services import Clock
from chatroom.infrastructure.persistence.exceptions import database_errors
from chatroom.infrastructure.persistence.models import ParticipantModel

logger = logging.getLogger(__name__)


class SQLitePresenceRegistry:
    """SQLite 版 PresenceRegistry 実装

    すべての書き込みは単一の SQL 文で行う。
    入室は name の一意制約、ハートビートと退室は条件付き UPDATE / DELETE に
    任せることで、同名ユーザーに対する操作をデータベース側で直列化する。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
        clock: Clock,
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
            clock: last_seen に使う時刻源
        """
        self._session_factory = session_factory
        self._clock = clock

    async def join(self, name: str) -> User:
        """ユーザーを在室として登録する（条件付き挿入）

        Args:
            name: ユーザー名

        Returns:
            登録されたユーザー

        Raises:
            ConflictError: 同名ユーザーが既に在室している
        """
        model = ParticipantModel(name=name, last_seen=self._clock.monotonic())
        with database_errors("join"):
            async with self._session_factory() as session:
                session.add(model)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    raise ConflictError(name) from e
        return self._to_entity(model)

    async def heartbeat(self, name: str) -> None:
        """最終ハートビート時刻を更新する

        Args:
            name: ユーザー名

        Raises:
            NotFoundError: ユーザーが在室していない
        """
        stmt = (
            update(ParticipantModel)
            .where(ParticipantModel.name == name)  # type: ignore[arg-type]
            .values(last_seen=self._clock.monotonic())
        )
        with database_errors("heartbeat"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                updated = result.rowcount  # type: ignore[union-attr]
        if updated == 0:
            raise NotFoundError(name)

    async def find_by_name(self, name: str) -> User | None:
        """名前で在室ユーザーを検索する

        Args:
            name: ユーザー名

        Returns:
            ユーザー（在室していない場合は None）
        """
        with database_errors("find_by_name"):
            async with self._session_factory() as session:
                result = await session.exec(
                    select(ParticipantModel).where(ParticipantModel.name == name)
                )
                model = result.first()
        if model is None:
            return None
        return self._to_entity(model)

    async def snapshot(self) -> list[User]:
        """在室ユーザー一覧を取得する

        単一の SELECT で読むため、途中まで入室・退室したユーザーは含まれない。

        Returns:
            ユーザーリスト（入室順）
        """
        with database_errors("snapshot"):
            async with self._session_factory() as session:
                result = await session.exec(
                    select(ParticipantModel).order_by(
                        ParticipantModel.id  # type: ignore[arg-type]
                    )
                )
                models = result.all()
        return [self._to_entity(m) for m in models]

    async def evict_if_stale(self, name: str, expected_last_seen: float) -> bool:
        """last_seen が期待値と一致する場合のみユーザーを削除する

        Args:
            name: ユーザー名
            expected_last_seen: スナップショット時点の last_seen

        Returns:
            削除した場合 True、ハートビートで更新済み・退室済みの場合 False
        """
        stmt = delete(ParticipantModel).where(
            ParticipantModel.name == name,  # type: ignore[arg-type]
            ParticipantModel.last_seen == expected_last_seen,  # type: ignore[arg-type]
        )
        with database_errors("evict_if_stale"):
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                evicted = result.rowcount > 0  # type: ignore[union-attr]
        if not evicted:
            logger.debug("Skipped eviction of %s: presence was renewed", name)
        return evicted

    async def clear(self) -> int:
        """全在室情報を削除する

        Returns:
            削除した件数
        """
        with database_errors("clear"):
            async with self._session_factory() as session:
                result = await session.execute(delete(ParticipantModel))
                await session.commit()
                return result.rowcount  # type: ignore[union-attr]

    def _to_entity(self, model: ParticipantModel) -> User:
        """モデルをエンティティに変換する

        Args:
            model: ParticipantModel インスタンス

        Returns:
            User エンティティ
        """
        return User(name=model.name, last_seen=model.last_seen)
