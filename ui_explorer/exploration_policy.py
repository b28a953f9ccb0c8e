from __future__ import annotations

"""Minimal exploration driver built around a model-based selector."""

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .action_selector import FitnessProportionateSelector, ModelBasedSelector
from .errors import EmptyCandidateSet
from .knowledge import ExplorationAction, ExplorationContext, UIState

logger = logging.getLogger(__name__)


class Device:
    """Interface of the application driver: observe states, execute actions."""

    def observe(self) -> UIState:
        raise NotImplementedError

    def execute(self, action: ExplorationAction) -> None:
        raise NotImplementedError


@dataclass
class TraceItem:
    step: int
    state_id: str
    target_id: Optional[str]
    action_type: Optional[str]
    error: str = ""


class ExplorationAgent:
    """Runs observe -> update -> choose -> execute until `max_steps` is reached."""

    def __init__(
        self,
        device: Device,
        context: ExplorationContext,
        selector: FitnessProportionateSelector | ModelBasedSelector,
        max_steps: int = 100,
    ) -> None:
        self._device = device
        self._context = context
        self._selector = selector
        self._max_steps = max_steps
        self.trace: List[TraceItem] = []
        self.failed_steps: int = 0

    # ------------------------------------------------------------------
    def explore(self) -> List[TraceItem]:
        """Entry-point of the exploration loop. Returns the trace of executed steps."""
        state = self._device.observe()
        self._context.notify_interaction(None, state)
        logger.debug("Initial state: %s", state.state_id)

        for step in range(self._max_steps):
            try:
                action = self._selector.choose_action(state)
            except EmptyCandidateSet as e:
                # the decision step failed, there is nothing to execute
                logger.warning("Step %d failed in state %s: %s", step, state.state_id, e)
                self.failed_steps += 1
                self.trace.append(TraceItem(step, state.state_id, None, None, error=str(e)))
                break

            self._device.execute(action)
            self.trace.append(
                TraceItem(step, state.state_id, action.target.element_id, action.action_type.value)
            )
            state = self._device.observe()
            self._context.notify_interaction(action, state)

        logger.info(
            "Exploration finished after %d steps (%d failed)", len(self.trace), self.failed_steps
        )
        return self.trace

    # ------------------------------------------------------------------
    def to_json(self) -> Dict[str, Any]:
        return {
            "steps": [asdict(t) for t in self.trace],
            "failed_steps": self.failed_steps,
        }

    def save_trace(self, output_dir: str) -> str:
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, "trace.json")
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(self.to_json(), fh, indent=2)
        return path
