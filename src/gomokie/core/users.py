"""Local user accounts as reported by the engine."""

from __future__ import annotations

from dataclasses import dataclass

from gomokie.core.payload import as_list, as_mapping, field


@dataclass(frozen=True, slots=True)
class UserInfo:
    id: str
    name: str
    created_at: str
    data_dir: str

    @classmethod
    def from_payload(cls, value: object) -> UserInfo:
        payload = as_mapping(value, "user")
        return cls(
            id=field(payload, "id", str),
            name=field(payload, "name", str),
            created_at=field(payload, "createdAt", str),
            data_dir=field(payload, "dataDir", str),
        )


@dataclass(frozen=True, slots=True)
class UsersSnapshot:
    active_user_id: str
    users: tuple[UserInfo, ...]

    @classmethod
    def from_payload(cls, value: object) -> UsersSnapshot:
        payload = as_mapping(value, "users")
        return cls(
            active_user_id=field(payload, "activeUser", str),
            users=tuple(
                UserInfo.from_payload(u) for u in as_list(payload.get("users"), "users")
            ),
        )

    @property
    def active_user(self) -> UserInfo | None:
        for user in self.users:
            if user.id == self.active_user_id:
                return user
        return None
