"""
Action and Receipt models — one external command and its outcome.

The installer builds Actions; adapters run them and hand back a
Receipt. A failed command is a Receipt with ``status="failed"``,
not an exception.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class Action(BaseModel):
    """A command to be executed by an adapter.

    ``args`` is the full argv, program first. ``capture`` asks the
    adapter to collect stdout/stderr instead of streaming them.
    """

    id: str                         # step identifier, e.g. "aqt-install-qt"
    name: str = ""                  # human-readable name
    args: list[str] = Field(default_factory=list)
    capture: bool = False
    timeout: int | None = None      # seconds, None = wait forever

    @property
    def command_line(self) -> str:
        """The argv joined for display."""
        return " ".join(self.args)


class Receipt(BaseModel):
    """What happened when an adapter ran an action."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"
    output: str = ""
    error: str | None = None
    return_code: int | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A receipt for an action that was not run (dry run)."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
