"""
Mock adapter — test double for command execution.

Records every action it receives. Unless told otherwise it answers
with an empty successful receipt.
"""

from __future__ import annotations

from src.adapters.base import Adapter, ExecutionContext
from src.core.models.action import Action, Receipt


class MockAdapter(Adapter):
    """In-memory adapter: canned receipts keyed by action ID."""

    def __init__(self, default_output: str = ""):
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def actions(self) -> list[Action]:
        """The actions received, in order."""
        return [ctx.action for ctx in self.call_log]

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_output(self, action_id: str, output: str) -> None:
        """Answer ``action_id`` with a successful receipt carrying ``output``."""
        self._responses[action_id] = Receipt.success(
            adapter=self.name, action_id=action_id, output=output, return_code=0
        )

    def set_failure(
        self, action_id: str, error: str = "Mock failure", return_code: int = 1
    ) -> None:
        """Make ``action_id`` fail like a command exiting with ``return_code``."""
        self._responses[action_id] = Receipt.failure(
            adapter=self.name, action_id=action_id, error=error, return_code=return_code
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        receipt = self._responses.get(context.action.id)
        if receipt is not None:
            return receipt
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=self._default_output,
            return_code=0,
        )

    def reset(self) -> None:
        """Forget recorded calls and canned responses."""
        self.call_log.clear()
        self._responses.clear()
