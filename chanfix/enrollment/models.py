from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..errors.internal import ParsingError
from ..irc.models import UserIdentity


@dataclass(frozen=True, slots=True)
class EnrolledUser:
    """Identity of one channel operator captured at enrollment time."""

    nick: str
    ident: str
    host: str

    @classmethod
    def from_identity(cls, identity: UserIdentity) -> EnrolledUser:
        return cls(nick=identity.nick, ident=identity.ident, host=identity.host)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EnrolledUser:
        """Build from a persisted record.

        Accepts lower-case keys and the capitalized ``Nick``/``Ident``/``Host``
        keys of older enrollment files.
        """
        values: dict[str, str] = {}
        for key in ("nick", "ident", "host"):
            value = data.get(key, data.get(key.capitalize()))
            if not isinstance(value, str) or not value:
                raise ParsingError(
                    f"enrolled user is missing '{key}'", data={"record": dict(data)}
                )
            values[key] = value
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        return {"nick": self.nick, "ident": self.ident, "host": self.host}

    @property
    def hostmask(self) -> str:
        return f"{self.nick}!{self.ident}@{self.host}"
