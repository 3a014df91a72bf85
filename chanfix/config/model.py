from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import DEFAULT_PENDING_TIMEOUT


class BotConfig(BaseModel):
    """Connection and behavior settings for the ChanFix service.

    Attributes:
        server: IRC server hostname.
        port: IRC server port.
        tls: Whether to wrap the connection in TLS.
        nick: Nickname the service registers with.
        realname: Real name sent with USER.
        oper_name: Operator name for OPER, paired with ``oper_pass``.
        oper_pass: Operator password for OPER.
        enrollment_file: Path of the JSON enrollment file. Empty means the
            default inside the config directory.
        pending_timeout: Seconds an enrollment may wait for its join.
        match_host: Require the host as well as the ident to match on fix.
        promote_command: Command used to grant ops, sent as
            ``<command> <channel> +o <nick>``.
    """

    server: str = Field(min_length=1)
    port: int = Field(default=6667, ge=1, le=65535)
    tls: bool = False
    nick: str = Field(default="ChanFix", min_length=1)
    realname: str = "Channel op repair services"
    oper_name: str | None = None
    oper_pass: str | None = None
    enrollment_file: str = ""
    pending_timeout: float = Field(default=DEFAULT_PENDING_TIMEOUT, gt=0)
    match_host: bool = False
    promote_command: str = Field(default="SAMODE", min_length=1)

    @field_validator("server", "nick", "promote_command", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("nick")
    @classmethod
    def validate_nick(cls, v: str) -> str:
        if any(ch in v for ch in " ,*?!@#:"):
            raise ValueError(f"invalid nickname: {v!r}")
        return v

    @model_validator(mode="after")
    def validate_oper(self) -> BotConfig:
        """Require oper_name and oper_pass together."""
        if bool(self.oper_name) != bool(self.oper_pass):
            raise ValueError("oper_name and oper_pass must be set together")
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BotConfig:
        return cls.model_validate(dict(data))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @staticmethod
    def template() -> dict[str, Any]:
        """Starter configuration written when no config file exists."""
        return {
            "server": "irc.example.net",
            "port": 6667,
            "tls": False,
            "nick": "ChanFix",
            "realname": "Channel op repair services",
            "oper_name": "chanfix",
            "oper_pass": "change-me",
            "pending_timeout": DEFAULT_PENDING_TIMEOUT,
            "match_host": False,
            "promote_command": "SAMODE",
        }
