"""Message store protocol."""

from typing import Protocol

from chatroom.domain.entities import Message


class MessageStore(Protocol):
    """メッセージログの抽象インターフェース

    追記専用で、全メッセージに一意かつ単調増加するシーケンス番号を振る。
    """

    async def append(self, message: Message, *, trusted: bool = False) -> int:
        """メッセージを追記する

        Args:
            message: 追記するメッセージ
            trusted: 内部呼び出し元からの追記か（status 型は True の場合のみ許可）

        Returns:
            割り当てられたシーケンス番号

        Raises:
            ValidationError: to / text が空、または type が不正
        """
        ...

    async def append_from_present(self, message: Message) -> int:
        """在室中の送信者からのメッセージを追記する

        在室確認と追記は不可分に行う。

        Args:
            message: 追記するメッセージ（status 型は不可）

        Returns:
            割り当てられたシーケンス番号

        Raises:
            ValidationError: to / text が空、または type が不正
            NotFoundError: 送信者が在室していない
        """
        ...

    async def recent(self, limit: int) -> list[Message]:
        """最新のメッセージを取得する

        Args:
            limit: 取得する最大件数（正の整数）

        Returns:
            メッセージリスト（古い順）

        Raises:
            ValidationError: limit が正の整数でない
        """
        ...
