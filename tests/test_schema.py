"""Tests for the ARFF training schema."""

import pytest

from ui_explorer.errors import SchemaError
from ui_explorer.schema import NOMINAL, NUMERIC, SchemaColumn, TrainingSchema, load_schema


class TestLoadSchema:
    def test_columns_and_domains(self, schema):
        assert [c.name for c in schema.columns] == ["type", "parent", "child1", "child2", "HasEvent"]
        assert schema.column(0).domain == ("button", "checkbox", "textview", "edittext", "linearlayout")
        assert schema.column(4).domain == ("false", "true")
        assert schema.class_index == 4

    def test_index_of(self, schema):
        assert schema.index_of(0, "textview") == 2
        assert schema.index_of(1, "none") == 2
        assert schema.index_of(4, "false") == 0

    def test_unknown_value_yields_minus_one(self, schema):
        assert schema.index_of(0, "imageview") == -1

    def test_numeric_columns_have_no_domain(self, tmp_path):
        path = tmp_path / "mixed.arff"
        path.write_text(
            "@relation mixed\n"
            "@attribute depth numeric\n"
            "@attribute label {false,true}\n"
            "@data\n"
            "1,true\n",
            encoding="utf-8",
        )
        schema = load_schema(path)
        assert schema.column(0).kind == NUMERIC
        assert schema.column(0).domain == ()
        assert schema.index_of(0, "1") == -1

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaError):
            load_schema(tmp_path / "nope.arff")

    def test_label_must_be_binary_nominal(self, tmp_path):
        path = tmp_path / "bad.arff"
        path.write_text(
            "@relation bad\n@attribute type {a,b}\n@attribute label numeric\n@data\na,1\n",
            encoding="utf-8",
        )
        with pytest.raises(SchemaError):
            load_schema(path)


class TestTrainingSchema:
    def test_empty_schema_rejected(self):
        with pytest.raises(SchemaError):
            TrainingSchema(())

    def test_schema_is_immutable(self, schema):
        with pytest.raises(AttributeError):
            schema.columns = ()

    def test_column_index_of(self):
        col = SchemaColumn("type", NOMINAL, ("a", "b"))
        assert col.index_of("b") == 1
        assert col.index_of("c") == -1
