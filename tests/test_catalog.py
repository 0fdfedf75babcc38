"""Tests for the module catalog loader."""

from pathlib import Path

import pytest

from codetrain.config.app_config import DEFAULT_CATALOG_PATH
from codetrain.core.catalog import CatalogError, ModuleCatalog, load_catalog


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "catalog.yaml"
    path.write_text(text)
    return path


MINIMAL_MODULE = """
modules:
  - id: {id}
    title: "Module {id}"
    order_index: {order}
    content:
      quiz:
        - question: "Pick one"
          options: ["a", "b"]
          correct: {correct}
"""


class TestDefaultCatalog:
    """Tests for the bundled catalog."""

    def test_loads(self):
        """Bundled catalog parses and is non-empty."""
        catalog = load_catalog(DEFAULT_CATALOG_PATH)
        assert len(catalog) >= 2

    def test_ordered_by_order_index(self):
        """Modules come out in display order."""
        modules = load_catalog(DEFAULT_CATALOG_PATH).list_modules()
        orders = [m.order_index for m in modules]
        assert orders == sorted(orders)

    def test_quiz_answers_index_options(self):
        """Every quiz answer points at an existing option."""
        for module in load_catalog(DEFAULT_CATALOG_PATH).list_modules():
            for question in module.content.quiz:
                assert 0 <= question.correct < len(question.options)

    def test_summary_has_no_content(self):
        """Summary carries metadata only."""
        module = load_catalog(DEFAULT_CATALOG_PATH).get(1)
        assert module is not None
        assert "content" not in module.summary()
        assert module.summary()["id"] == 1


class TestModuleCatalog:
    """Tests for ModuleCatalog lookups."""

    def test_get_unknown(self):
        assert ModuleCatalog([]).get(42) is None

    def test_order_ties_broken_by_id(self, tmp_path):
        """Equal order_index falls back to id order."""
        text = MINIMAL_MODULE.format(id=2, order=1, correct=0) + MINIMAL_MODULE.format(
            id=1, order=1, correct=0
        ).replace("modules:\n", "")
        catalog = load_catalog(_write(tmp_path, text))
        assert [m.id for m in catalog.list_modules()] == [1, 2]


class TestLoadCatalogErrors:
    """Tests for malformed catalogs."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(_write(tmp_path, "modules: [unclosed"))

    def test_correct_out_of_range(self, tmp_path):
        """A quiz answer outside the options is rejected."""
        path = _write(tmp_path, MINIMAL_MODULE.format(id=1, order=1, correct=2))
        with pytest.raises(CatalogError, match="correct"):
            load_catalog(path)

    def test_duplicate_ids(self, tmp_path):
        text = MINIMAL_MODULE.format(id=1, order=1, correct=0) + MINIMAL_MODULE.format(
            id=1, order=2, correct=1
        ).replace("modules:\n", "")
        with pytest.raises(CatalogError, match="Duplicate"):
            load_catalog(_write(tmp_path, text))

    def test_unknown_difficulty(self, tmp_path):
        text = 'modules:\n  - id: 1\n    title: "X"\n    difficulty: expert\n'
        with pytest.raises(CatalogError, match="difficulty"):
            load_catalog(_write(tmp_path, text))

    def test_missing_title(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(_write(tmp_path, "modules:\n  - id: 1\n"))
