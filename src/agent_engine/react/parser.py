"""
Response parser for the ReAct text grammar.

The model answers one reasoning turn as marker-prefixed lines:

    Thought: <reasoning>
    Action: <tool name>
    Action Input: <JSON arguments>
    Observation: <tool result>
    Final Answer: <answer for the user>

Markers are configuration (MarkerGrammar), not hardcoded; the default is the
Chinese grammar of the reference deployment. Only single-line fields are
captured: a field body that continues on the next line is cut at the line
break. That is a known limitation of the grammar.
"""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MarkerGrammar:
    """Literal line prefixes for each field of a reasoning turn."""

    thought: str = "思考："
    action: str = "行动："
    action_input: str = "行动输入："
    observation: str = "观察："
    answer: str = "最终答案："

    @classmethod
    def chinese(cls) -> "MarkerGrammar":
        return cls()

    @classmethod
    def english(cls) -> "MarkerGrammar":
        return cls(
            thought="Thought:",
            action="Action:",
            action_input="Action Input:",
            observation="Observation:",
            answer="Final Answer:",
        )

    @classmethod
    def named(cls, name: str) -> "MarkerGrammar":
        """Look up a preset by name ('zh' or 'en')."""
        presets = {"zh": cls.chinese, "en": cls.english}
        try:
            return presets[name.lower()]()
        except KeyError:
            raise ValueError(
                f"Unknown marker grammar '{name}' (expected one of: {', '.join(presets)})"
            ) from None

    def ordered_fields(self) -> list[tuple[str, str]]:
        """(field, marker) pairs, longest marker first.

        Longest-first keeps 'Action:' from shadowing 'Action Input:' in
        grammars where one marker is a prefix of another.
        """
        pairs = [
            ("thought", self.thought),
            ("action", self.action),
            ("action_input", self.action_input),
            ("observation", self.observation),
            ("answer", self.answer),
        ]
        return sorted(pairs, key=lambda p: len(p[1]), reverse=True)


@dataclass(frozen=True)
class ParsedResponse:
    """Fields extracted from one model turn; None when absent.

    has_action_input records that the action-input marker was present, so a
    JSON null payload is still an action input.
    """

    thought: str | None = None
    action: str | None = None
    action_input: Any = None
    observation: str | None = None
    answer: str | None = None
    has_action_input: bool = False

    @property
    def has_answer(self) -> bool:
        return bool(self.answer)

    @property
    def has_action(self) -> bool:
        return bool(self.action) and self.has_action_input


def _decode_action_input(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_response(text: str, grammar: MarkerGrammar | None = None) -> ParsedResponse:
    """Extract the marker fields from model text.

    Leading whitespace on a line is ignored and the first matching marker
    wins. When a marker repeats, the last line carrying it wins. Action
    input is decoded as JSON, falling back to the raw trimmed string.
    A non-empty final answer clears action, action input and observation.
    """
    grammar = grammar or MarkerGrammar()
    fields: dict[str, Any] = {}
    ordered = grammar.ordered_fields()

    for line in (text or "").splitlines():
        stripped = line.lstrip()
        for name, marker in ordered:
            if stripped.startswith(marker):
                value = stripped[len(marker):].strip()
                if name == "action_input":
                    fields[name] = _decode_action_input(value)
                    fields["has_action_input"] = True
                else:
                    fields[name] = value
                break

    if fields.get("answer"):
        fields.pop("action", None)
        fields.pop("action_input", None)
        fields.pop("has_action_input", None)
        fields.pop("observation", None)

    return ParsedResponse(**fields)


class ResponseParser:
    """parse_response bound to one grammar."""

    def __init__(self, grammar: MarkerGrammar | None = None):
        self.grammar = grammar or MarkerGrammar()

    def parse(self, text: str) -> ParsedResponse:
        return parse_response(text, self.grammar)
