"""Presence registry protocol."""

from typing import Protocol

from chatroom.domain.entities import User


class PresenceRegistry(Protocol):
    """在室ユーザー管理の抽象インターフェース

    在室中のユーザーと最終ハートビート時刻を保持する。
    同名ユーザーに対する操作はすべて単一のアトミック操作で行い、
    「存在確認してから書き込む」形の競合を起こさない。
    """

    async def join(self, name: str) -> User:
        """ユーザーを在室として登録する

        同名ユーザーが存在しない場合のみ挿入する（条件付き挿入）。

        Args:
            name: ユーザー名

        Returns:
            登録されたユーザー

        Raises:
            ConflictError: 同名ユーザーが既に在室している
        """
        ...

    async def heartbeat(self, name: str) -> None:
        """最終ハートビート時刻を現在時刻に更新する

        Args:
            name: ユーザー名

        Raises:
            NotFoundError: ユーザーが在室していない
        """
        ...

    async def find_by_name(self, name: str) -> User | None:
        """名前で在室ユーザーを検索する

        Args:
            name: ユーザー名

        Returns:
            ユーザー（在室していない場合は None）
        """
        ...

    async def snapshot(self) -> list[User]:
        """在室ユーザー一覧を一時点の一貫したビューとして取得する

        Returns:
            ユーザーリスト（入室順）
        """
        ...

    async def evict_if_stale(self, name: str, expected_last_seen: float) -> bool:
        """最終ハートビート時刻が変わっていない場合のみユーザーを削除する

        スナップショット取得後にハートビートで更新されたユーザーは削除しない。

        Args:
            name: ユーザー名
            expected_last_seen: スナップショット時点の最終ハートビート時刻

        Returns:
            削除した場合 True
        """
        ...

    async def clear(self) -> int:
        """全在室情報を削除する

        Returns:
            削除した件数
        """
        ...
