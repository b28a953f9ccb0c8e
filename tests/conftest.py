"""Shared fixtures: a small training schema, classifiers and UI states."""

import numpy as np
import pytest

from ui_explorer.knowledge import UIElement, UIState
from ui_explorer.schema import load_schema
from ui_explorer.type_resolver import TypeResolver

VOCABULARY = ("button", "checkbox", "textview", "edittext", "imageview", "linearlayout")

TYPES = ("button", "checkbox", "textview", "edittext", "linearlayout")
PARENTS = ("linearlayout", "button", "none")
CHILDREN = ("button", "checkbox", "textview", "none")

ARFF = """% widget event model training data
@relation HasEvent

@attribute type {button,checkbox,textview,edittext,linearlayout}
@attribute parent {linearlayout,button,none}
@attribute child1 {button,checkbox,textview,none}
@attribute child2 {button,checkbox,textview,none}
@attribute HasEvent {false,true}

@data
button,linearlayout,none,none,true
checkbox,linearlayout,none,none,true
textview,linearlayout,none,none,false
edittext,none,none,none,false
linearlayout,none,button,checkbox,false
"""


class LookupClassifier:
    """Stand-in estimator: the event probability depends only on the type index (slot 0).

    Like a one-hot encoded scikit-learn model, it rejects unseen (-1) values.
    """

    def __init__(self, probabilities):
        self.probabilities = probabilities
        self.seen = []

    def predict_proba(self, X):
        X = np.asarray(X)
        rows = []
        for row in X:
            if (row < 0).any():
                raise ValueError(f"Found unknown categories in row {row.tolist()}")
            self.seen.append(row.tolist())
            p = self.probabilities[int(row[0])]
            rows.append([1.0 - p, p])
        return np.array(rows)

    def predict(self, X):
        return (self.predict_proba(X)[:, 1] >= 0.5).astype(float)


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "baseModelFile.arff"
    path.write_text(ARFF, encoding="utf-8")
    return path


@pytest.fixture
def schema(schema_path):
    return load_schema(schema_path)


@pytest.fixture
def resolver():
    return TypeResolver(VOCABULARY)


@pytest.fixture
def lookup_classifier():
    # button, checkbox, textview, edittext, linearlayout
    return LookupClassifier({0: 0.9, 1: 0.6, 2: 0.2, 3: 0.4, 4: 0.1})


def _train_forest(label_values):
    """RandomForest behind a one-hot encoder with the schema's fixed categories."""
    from sklearn.ensemble import RandomForestClassifier
    from sklearn.pipeline import Pipeline
    from sklearn.preprocessing import OneHotEncoder

    rows, labels = [], []
    for t in range(len(TYPES)):
        for parent in (0, 2):
            for child in (0, 3):
                rows.append([t, parent, child, 3])
                labels.append(label_values[TYPES[t] in ("button", "checkbox")])
    X = np.array(rows * 4, dtype=float)
    y = np.array(labels * 4)

    categories = [
        [float(i) for i in range(len(domain))] for domain in (TYPES, PARENTS, CHILDREN, CHILDREN)
    ]
    clf = Pipeline(
        [
            ("onehot", OneHotEncoder(categories=categories, handle_unknown="error")),
            ("forest", RandomForestClassifier(n_estimators=15, random_state=0)),
        ]
    )
    clf.fit(X, y)
    return clf


@pytest.fixture
def sklearn_classifier():
    return _train_forest((0, 1))


@pytest.fixture
def string_label_classifier():
    """Forest trained on the nominal class labels of the schema."""
    return _train_forest(("false", "true"))


@pytest.fixture
def screen():
    """A list layout holding five widgets; the image view is unknown to the schema."""
    return UIState(
        [
            UIElement("root", "android.widget.LinearLayout"),
            UIElement("ok", "android.widget.Button", parent_id="root", clickable=True),
            UIElement("agree", "android.widget.CheckBox", parent_id="root", checkable=True),
            UIElement("label", "android.widget.TextView", parent_id="root", clickable=True),
            UIElement("name", "android.widget.EditText", parent_id="root", editable=True),
            UIElement("logo", "android.widget.ImageView", parent_id="root", clickable=True),
            UIElement("hidden", "android.widget.Button", parent_id="root", clickable=True, visible=False),
        ],
        state_id="form",
    )


@pytest.fixture
def empty_screen():
    return UIState([UIElement("root", "android.widget.LinearLayout")], state_id="blank")
