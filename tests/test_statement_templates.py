import json

import pytest
from pydantic import ValidationError

from statement_templates import DEFAULT_REGISTRY, TemplateRegistry, get_statement_templates, load_registry


def test_default_registry_order():
    ids = [t.id for t in get_statement_templates()]
    assert ids == ["hdfc", "icici", "sbi", "axis", "kotak", "yes", "canara", "groww"]


def test_registry_lookup():
    assert DEFAULT_REGISTRY.get("sbi").name == "SBI Bank"
    assert DEFAULT_REGISTRY.get("groww").source_type == "broker"
    assert DEFAULT_REGISTRY.get("missing") is None


def test_templates_are_frozen():
    template = DEFAULT_REGISTRY.get("hdfc")
    with pytest.raises(ValidationError):
        template.name = "Other"


def test_empty_registry_is_not_replaced_by_default():
    assert get_statement_templates(TemplateRegistry([])) == ()


def test_load_registry_without_path_uses_builtins():
    assert len(load_registry(None)) == len(DEFAULT_REGISTRY)


def test_load_registry_from_json(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(
        json.dumps(
            {
                "templates": [
                    {
                        "id": "demo",
                        "name": "Demo Bank",
                        "sourceName": "Demo Bank",
                        "sourceType": "bank",
                        "aliases": {"date": ["posted_on"], "amount": ["value"]},
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    registry = load_registry(path)
    assert [t.id for t in registry] == ["demo"]
    assert registry.get("demo").aliases["date"] == ("posted_on",)


def test_load_registry_rejects_bad_files(tmp_path):
    missing_key = tmp_path / "a.json"
    missing_key.write_text(json.dumps({"banks": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_registry(missing_key)

    bad_type = tmp_path / "b.json"
    bad_type.write_text(
        json.dumps({"templates": [{"id": "x", "name": "X", "sourceName": "X", "sourceType": "wallet", "aliases": {}}]}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_registry(bad_type)
