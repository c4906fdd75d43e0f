"""Plan-aware compression hints.

When the agent works from a task plan, summarization prompts get a hint
describing the plan so that content relevant to unfinished subtasks is
kept. Without a plan nothing changes.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Union

from jinja2 import Environment, StrictUndefined
from pydantic import BaseModel, Field


class PlanState(str, Enum):
    """Lifecycle state of a plan."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ABANDONED = "abandoned"


class SubTaskState(str, Enum):
    """Lifecycle state of a subtask."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ABANDONED = "abandoned"


class SubTask(BaseModel):
    """One step of a plan.

    Attributes:
        name: Short subtask name.
        description: What the subtask does.
        state: Current state.
        outcome: Result, once done.
    """

    name: str
    description: str = ""
    state: SubTaskState = SubTaskState.PENDING
    outcome: str | None = None


class Plan(BaseModel):
    """An external task plan the agent is executing."""

    name: str
    description: str = ""
    expected_outcome: str = ""
    state: PlanState = PlanState.TODO
    subtasks: list[SubTask] = Field(default_factory=list)


# A plan, or a callable returning the current plan (e.g. a notebook accessor)
PlanSource = Union[Plan, Callable[[], Union[Plan, None]]]

_env = Environment(
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)

_PLAN_HINT_TEMPLATE = _env.from_string(
    """<plan_aware_hint>
=== Current Plan Context ===
Plan Name: {{ plan.name }}
Plan State: {{ plan.state.value }}
Description: {{ plan.description }}
Expected Outcome: {{ plan.expected_outcome }}
{% if plan.subtasks %}

Subtasks:
{% for subtask in plan.subtasks %}
  [{{ loop.index }}] {{ subtask.name }} - State: {{ subtask.state.value }}
{% if subtask.state.value == "in_progress" %}
    Currently in progress - preserve related information
{% elif subtask.state.value == "done" and subtask.outcome %}
    Outcome: {{ subtask.outcome }}
{% endif %}
{% endfor %}
{% endif %}

=== Compression Guidelines ===
When compressing the above messages, prioritize information that:
1. Is directly related to the current plan and its subtasks
2. Supports the execution of in-progress subtasks
3. Contains outcomes or results from completed subtasks
4. Provides context for pending subtasks
5. Includes plan-related tool calls and their results
{% if plan.state.value == "in_progress" %}

Specifically:
- Preserve all information related to active subtasks
- Keep detailed results from tools used in plan execution
- Maintain context that helps track plan progress
{% endif %}
{% if in_progress_count %}
- Currently {{ in_progress_count }} subtask(s) in progress - preserve all related context
{% endif %}
{% if done_count %}
- {{ done_count }} subtask(s) completed - preserve their outcomes and results
{% endif %}
</plan_aware_hint>"""
)


def resolve_plan(source: PlanSource | None) -> Plan | None:
    """Return the current plan for ``source``."""
    if source is None or isinstance(source, Plan):
        return source
    return source()


def build_plan_hint(plan: Plan | None) -> str | None:
    """Render the plan hint appended to summarization prompts.

    Args:
        plan: The current plan, or ``None``.

    Returns:
        The hint text, or ``None`` when there is no plan.
    """
    if plan is None:
        return None
    in_progress = sum(1 for s in plan.subtasks if s.state == SubTaskState.IN_PROGRESS)
    done = sum(1 for s in plan.subtasks if s.state == SubTaskState.DONE)
    return _PLAN_HINT_TEMPLATE.render(
        plan=plan,
        in_progress_count=in_progress,
        done_count=done,
    )
