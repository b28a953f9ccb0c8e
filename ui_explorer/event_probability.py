from __future__ import annotations

"""Per-element event probabilities estimated by a pretrained classifier.

`EventProbabilityModel` is registered on the exploration context as a watcher.
After every interaction it re-encodes the actionable elements of the new state
and asks the classifier how likely each of them is to trigger an event. Readers
only ever see the complete result of one state: the cache is rebuilt and
published inside the same critical section that `get_probabilities` uses.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import joblib
import numpy as np

from .errors import EmptyCandidateSet, ModelLoadError, SchemaError
from .knowledge import ExplorationAction, UIElement, UIState, Watcher
from .schema import TrainingSchema, load_schema
from .type_resolver import TypeResolver, load_vocabulary

logger = logging.getLogger(__name__)

NONE_VALUE = "none"
FALSE_VALUE = "false"
NUM_SLOTS = 5


def load_classifier(path: str | Path) -> Any:
    """Load a joblib-serialized scikit-learn estimator."""
    logger.debug("Loading model file %s", path)
    try:
        model = joblib.load(path)
    except Exception as e:
        raise ModelLoadError(f"Could not load classifier from {path}: {e}") from e
    for method in ("predict", "predict_proba"):
        if not callable(getattr(model, method, None)):
            raise ModelLoadError(f"Classifier in {path} has no {method}() method")
    return model


class FeatureEncoder:
    """Encodes an element and its neighbourhood into the classifier's 5-slot vector.

    Slots: own type, parent type, first child type, second child type, label.
    Types are canonicalized with the `TypeResolver` and translated into their
    index in the schema domain of the slot (-1 when the domain lacks the value).
    The label slot always holds the index of ``"false"``.
    """

    def __init__(self, schema: TrainingSchema, resolver: Optional[TypeResolver] = None) -> None:
        if schema.num_attributes != NUM_SLOTS:
            raise SchemaError(
                f"Expected {NUM_SLOTS} attributes in the training schema, got {schema.num_attributes}"
            )
        self.schema = schema
        self.resolver = resolver or TypeResolver()

    def encode(self, element: UIElement, state: UIState) -> np.ndarray:
        values: List[str] = [self.resolver.resolve(element.type_label)]

        parent = state.parent_of(element)
        values.append(self.resolver.resolve(parent.type_label) if parent is not None else NONE_VALUE)

        children = state.children_of(element.element_id)
        for i in range(2):
            if len(children) > i:
                values.append(self.resolver.resolve(children[i].type_label))
            else:
                values.append(NONE_VALUE)

        values.append(FALSE_VALUE)
        return np.array(
            [self.schema.index_of(col, v) for col, v in enumerate(values)], dtype=float
        )


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one element: a probability, or the reason it failed."""

    element_id: str
    probability: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class EventProbabilityModel(Watcher):
    """Thread-safe cache of element id -> probability of having an event."""

    MEMBERSHIP_KIND = "event_probability/membership"
    CLASSIFICATION_KIND = "event_probability/classification"

    def __init__(
        self,
        classifier: Any,
        schema: TrainingSchema,
        use_class_membership_probability: bool = True,
        resolver: Optional[TypeResolver] = None,
    ) -> None:
        self.classifier = classifier
        self.schema = schema
        self.use_class_membership_probability = use_class_membership_probability
        self.encoder = FeatureEncoder(schema, resolver)
        self._lock = threading.Lock()
        self._probabilities: Dict[str, float] = {}

    @staticmethod
    def kind_for(use_class_membership_probability: bool) -> str:
        if use_class_membership_probability:
            return EventProbabilityModel.MEMBERSHIP_KIND
        return EventProbabilityModel.CLASSIFICATION_KIND

    @property
    def kind(self) -> str:  # type: ignore[override]
        return self.kind_for(self.use_class_membership_probability)

    @classmethod
    def from_files(
        cls,
        model_path: str | Path,
        schema_path: str | Path,
        use_class_membership_probability: bool = True,
        vocabulary_path: str | Path | None = None,
    ) -> "EventProbabilityModel":
        """Load classifier, schema and (optionally) vocabulary, then build the model."""
        classifier = load_classifier(model_path)
        schema = load_schema(schema_path)
        resolver = TypeResolver(load_vocabulary(vocabulary_path)) if vocabulary_path else None
        return cls(classifier, schema, use_class_membership_probability, resolver)

    # ------------------------------------------------------------------
    def _label_index(self, label: Any) -> float:
        """Index of a predicted label in the schema's class domain.

        Estimators trained on the nominal labels predict ``"false"``/``"true"``;
        those trained on label indices predict the index itself.
        """
        domain = self.schema.column(self.schema.class_index).domain
        if isinstance(label, (str, np.str_)):
            try:
                return float(domain.index(str(label)))
            except ValueError:
                raise ValueError(f"Predicted label {label!r} is not in the class domain {list(domain)}") from None
        return float(label)

    def _positive_column(self) -> int:
        """Column of the positive class in `predict_proba` output."""
        positive = self.schema.column(self.schema.class_index).domain[1]
        classes = [str(c) for c in getattr(self.classifier, "classes_", ())]
        if positive in classes:
            return classes.index(positive)
        return 1

    def classify(self, element: UIElement, state: UIState) -> Classification:
        """Encode and classify one element, reporting failures instead of raising.

        `ValueError`, `IndexError`, `TypeError` and `KeyError` raised by the
        estimator count as a failure of this element; anything else propagates.
        """
        vector = self.encoder.encode(element, state)
        features = vector[: self.schema.class_index].reshape(1, -1)
        try:
            if self.use_class_membership_probability:
                # distribution over [false, true]
                probability = float(self.classifier.predict_proba(features)[0][self._positive_column()])
            else:
                probability = self._label_index(self.classifier.predict(features)[0])
        except (ValueError, IndexError, TypeError, KeyError) as e:
            return Classification(element.element_id, error=str(e))
        return Classification(element.element_id, probability=probability)

    def update(self, state: UIState) -> None:
        """Rebuild the cache for the actionable elements of `state`."""
        with self._lock:
            probabilities: Dict[str, float] = {}
            for element in state.actionable_elements:
                result = self.classify(element, state)
                if not result.ok:
                    logger.error(
                        "Could not classify widget of type %s (%s). Ignoring it: %s",
                        element.type_label,
                        element.element_id,
                        result.error,
                    )
                    continue
                probabilities[element.element_id] = result.probability
            self._probabilities = probabilities
        logger.debug(
            "Probabilities updated for state %s: %d/%d elements classified",
            state.state_id,
            len(probabilities),
            len(state.actionable_elements),
        )

    def on_new_interaction(
        self, action: Optional[ExplorationAction], new_state: UIState
    ) -> None:
        self.update(new_state)

    def get_probabilities(self, state: UIState) -> Dict[UIElement, float]:
        """Cached probability of every actionable element in `state` (0.0 when unknown)."""
        with self._lock:
            actionable = state.actionable_elements
            if not actionable:
                raise EmptyCandidateSet(
                    f"No actionable widgets to be interacted with in state {state.state_id!r}"
                )
            return {e: self._probabilities.get(e.element_id, 0.0) for e in actionable}

    # region equality -----------------------------------------------------
    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, EventProbabilityModel)
            and other.use_class_membership_probability == self.use_class_membership_probability
            and other.classifier is self.classifier
        )

    def __hash__(self) -> int:
        return hash((id(self.classifier), self.use_class_membership_probability))
