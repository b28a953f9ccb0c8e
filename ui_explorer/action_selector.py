from __future__ import annotations

"""Model-based target selection.

Two selectors share the same plumbing:

ModelBasedSelector            – only elements the classifier labels as "has event"
                                (probability exactly 1.0), minus the last target.
FitnessProportionateSelector  – every actionable element, weighted by its event
                                probability (doubled for never-tried elements), picked
                                by roulette-wheel selection with stochastic acceptance.
"""

import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from .errors import EmptyCandidateSet
from .event_probability import EventProbabilityModel
from .knowledge import ActionCounter, ExplorationAction, ExplorationContext, UIElement, UIState
from .schema import TrainingSchema
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

DEFAULT_TRIALS = 10


def roulette_select(weights: Sequence[float], rng: random.Random) -> int:
    """Fitness proportionate selection: index drawn with probability weight / total.

    Falls back to the last index when the scan never crosses zero (rounding
    errors, or every weight being zero).
    """
    total = sum(weights)
    if total <= 0:
        return len(weights) - 1
    value = rng.random() * total
    for i, w in enumerate(weights):
        value -= w
        if value <= 0:
            return i
    return len(weights) - 1


def stochastic_select(
    weights: Sequence[float], trials: int = DEFAULT_TRIALS, rng: Optional[random.Random] = None
) -> int:
    """Roulette-wheel selection with stochastic acceptance.

    Runs `trials` independent roulette draws and returns the index drawn most
    often; ties go to the lowest index.
    """
    if not weights:
        raise EmptyCandidateSet("Cannot select from an empty weight vector")
    if trials < 1:
        raise ValueError(f"trials must be >= 1, got {trials}")
    rng = rng or random.Random()
    counter = [0] * len(weights)
    for _ in range(trials):
        counter[roulette_select(weights, rng)] += 1
    return counter.index(max(counter))


class _ModelSelector:
    """Plumbing shared by the model-driven selectors."""

    use_class_membership_probability = True

    def __init__(
        self,
        context: ExplorationContext,
        classifier: Any,
        schema: TrainingSchema,
        random_seed: int = 0,
        resolver: Optional[TypeResolver] = None,
        use_class_membership_probability: Optional[bool] = None,
    ) -> None:
        self.context = context
        self.random = random.Random(random_seed)
        mode = (
            self.use_class_membership_probability
            if use_class_membership_probability is None
            else use_class_membership_probability
        )
        self.model: EventProbabilityModel = context.get_or_create_watcher(
            EventProbabilityModel.kind_for(mode),
            lambda: EventProbabilityModel(classifier, schema, mode, resolver),
        )  # type: ignore[assignment]
        self.counter: ActionCounter = context.get_or_create_watcher(
            ActionCounter.kind, ActionCounter
        )  # type: ignore[assignment]

    def available_elements(self, state: UIState) -> List[UIElement]:
        raise NotImplementedError

    def choose_action(self, state: UIState) -> ExplorationAction:
        raise NotImplementedError

    def _action_for(self, element: UIElement) -> ExplorationAction:
        action = ExplorationAction.for_element(element)
        logger.debug("Selected %s on %s (%s)", action.action_type.value, element.element_id, element.type_label)
        return action

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.model == self.model  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(type(self))


class ModelBasedSelector(_ModelSelector):
    """Picks uniformly among elements classified as having an event."""

    use_class_membership_probability = False

    def available_elements(self, state: UIState) -> List[UIElement]:
        candidates = [e for e, p in self.model.get_probabilities(state).items() if p == 1.0]
        last = self.context.last_target
        if last is not None:
            candidates = [e for e in candidates if e.element_id != last.element_id]
        return candidates

    def choose_action(self, state: UIState) -> ExplorationAction:
        candidates = self.available_elements(state)
        if not candidates:
            raise EmptyCandidateSet(
                f"No element classified as having an event in state {state.state_id!r}"
            )
        return self._action_for(self.random.choice(candidates))


class FitnessProportionateSelector(_ModelSelector):
    """Selects elements with probability proportional to their event probability."""

    def __init__(
        self,
        context: ExplorationContext,
        classifier: Any,
        schema: TrainingSchema,
        random_seed: int = 0,
        resolver: Optional[TypeResolver] = None,
        use_class_membership_probability: Optional[bool] = None,
        trials: int = DEFAULT_TRIALS,
    ) -> None:
        super().__init__(
            context, classifier, schema, random_seed, resolver, use_class_membership_probability
        )
        self.trials = trials

    def available_elements(self, state: UIState) -> List[UIElement]:
        return list(self.model.get_probabilities(state))

    def candidate_weights(self, state: UIState) -> Dict[UIElement, float]:
        """Event probabilities, doubled for elements that were never acted on."""
        return {
            e: p * 2 if self.counter.count(e.element_id) == 0 else p
            for e, p in self.model.get_probabilities(state).items()
        }

    def choose_action(self, state: UIState) -> ExplorationAction:
        weights = self.candidate_weights(state)
        if not weights:
            raise EmptyCandidateSet(f"No candidates in state {state.state_id!r}")
        candidates = list(weights)
        idx = stochastic_select(list(weights.values()), self.trials, self.random)
        return self._action_for(candidates[idx])
