"""Data models for the single-agent loop: Step trace entries and the run outcome."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from ..errors import MalformedModelOutput, StepBudgetExhausted


@dataclass(frozen=True)
class Step:
    """One reason-act-observe turn, or the terminal final-answer turn."""

    question: str
    thought: str = ""
    action: str = ""
    action_input: Any = field(default_factory=dict)
    observation: str = ""
    answer: str = ""
    step_index: int = 0
    error: str | None = None  # set when the tool failed and the failure became the observation

    def __post_init__(self):
        if bool(self.action) == bool(self.answer):
            raise ValueError("A step carries exactly one of action or answer")

    @property
    def is_final(self) -> bool:
        return bool(self.answer)

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "thought": self.thought,
            "action": self.action,
            "action_input": self.action_input,
            "observation": self.observation,
            "answer": self.answer,
            "step": self.step_index,
            "error": self.error,
        }


class RunStatus(str, Enum):
    """How a run ended."""

    COMPLETED = "completed"  # final answer produced
    EXHAUSTED = "exhausted"  # step budget used up
    CONFUSED = "confused"  # model output had no answer and no action


@dataclass(frozen=True)
class AgentRun:
    """Tagged outcome of ReActEngine.run.

    Behaves as the ordered sequence of its steps, so len(run) and run[-1]
    work directly on the trace.
    """

    status: RunStatus
    steps: tuple[Step, ...] = ()
    max_steps: int = 0
    last_raw_output: str = ""

    @property
    def answer(self) -> str | None:
        if self.status is RunStatus.COMPLETED:
            return self.steps[-1].answer
        return None

    @property
    def completed(self) -> bool:
        return self.status is RunStatus.COMPLETED

    def raise_for_status(self) -> "AgentRun":
        """Raise for runs that ended without a final answer."""
        if self.status is RunStatus.EXHAUSTED:
            raise StepBudgetExhausted(self.steps, self.max_steps)
        if self.status is RunStatus.CONFUSED:
            raise MalformedModelOutput(self.steps, self.last_raw_output)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "answer": self.answer,
            "steps": [s.to_dict() for s in self.steps],
        }

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __getitem__(self, index):
        return self.steps[index]
