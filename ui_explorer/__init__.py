"""UI Explorer: model-based target selection for automated UI exploration.

A pretrained classifier estimates, for every actionable element of the current
UI state, how likely an interaction with it is to trigger an event. A selector
then turns those estimates into the next exploration action.

Key sub-modules:

knowledge.py          – UI states, elements, actions and the exploration context registry.
type_resolver.py      – Canonicalization of raw widget class names.
schema.py             – Training schema (ARFF attribute domains) of the classifier.
event_probability.py  – Feature encoding and the thread-safe event probability model.
action_selector.py    – Model-based and fitness-proportionate target selection.
exploration_policy.py – Minimal observe/choose/execute driver loop.
"""

from .action_selector import (
    FitnessProportionateSelector,
    ModelBasedSelector,
    roulette_select,
    stochastic_select,
)
from .errors import EmptyCandidateSet, ExplorerError, ModelLoadError, SchemaError
from .event_probability import EventProbabilityModel, FeatureEncoder, load_classifier
from .knowledge import (
    ActionCounter,
    ActionType,
    ExplorationAction,
    ExplorationContext,
    UIElement,
    UIState,
)
from .schema import TrainingSchema, load_schema
from .type_resolver import TypeResolver
