"""Learning module catalog.

Loads the read-only module catalog from a YAML file at startup.

Usage:
    from codetrain.core.catalog import load_catalog

    catalog = load_catalog(Path("modules_v1.yaml"))
    module = catalog.get(1)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

DIFFICULTIES = ("beginner", "intermediate", "advanced")


class CatalogError(Exception):
    """Raised when the catalog file is missing or malformed."""


@dataclass
class Concept:
    """A concept explained inside a module."""

    title: str
    explanation: str
    example: str = ""
    analogy: str = ""


@dataclass
class Exercise:
    """A coding exercise with starter code, solution and hints."""

    title: str
    description: str
    starter_code: str = ""
    solution: str = ""
    hints: list[str] = field(default_factory=list)


@dataclass
class QuizQuestion:
    """A multiple choice question. `correct` indexes into options."""

    question: str
    options: list[str]
    correct: int
    explanation: str = ""


@dataclass
class ModuleContent:
    """Full lesson payload of a module."""

    story: str = ""
    concepts: list[Concept] = field(default_factory=list)
    exercises: list[Exercise] = field(default_factory=list)
    quiz: list[QuizQuestion] = field(default_factory=list)


@dataclass
class Module:
    """A learning module."""

    id: int
    title: str
    description: str
    difficulty: str
    estimated_time: str
    order_index: int
    content: ModuleContent = field(default_factory=ModuleContent)

    def summary(self) -> dict[str, Any]:
        """Metadata only, without the content payload."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "estimated_time": self.estimated_time,
            "order_index": self.order_index,
        }


class ModuleCatalog:
    """Ordered, read-only collection of modules."""

    def __init__(self, modules: list[Module]):
        self._modules = sorted(modules, key=lambda m: (m.order_index, m.id))
        self._by_id = {m.id: m for m in self._modules}

    def __len__(self) -> int:
        return len(self._modules)

    def list_modules(self) -> list[Module]:
        return list(self._modules)

    def get(self, module_id: int) -> Module | None:
        return self._by_id.get(module_id)


def _parse_question(data: dict[str, Any], where: str) -> QuizQuestion:
    options = [str(o) for o in data.get("options", [])]
    correct = data.get("correct")
    if len(options) < 2:
        raise CatalogError(f"{where}: quiz question needs at least two options")
    if not isinstance(correct, int) or not 0 <= correct < len(options):
        raise CatalogError(f"{where}: 'correct' must index into options")
    return QuizQuestion(
        question=data["question"],
        options=options,
        correct=correct,
        explanation=data.get("explanation", ""),
    )


def _parse_module(data: dict[str, Any]) -> Module:
    """Parse a module entry from YAML data."""
    try:
        module_id = int(data["id"])
        where = f"module {module_id}"
        content_data = data.get("content") or {}

        content = ModuleContent(
            story=str(content_data.get("story", "")).strip(),
            concepts=[
                Concept(
                    title=c["title"],
                    explanation=str(c["explanation"]).strip(),
                    example=str(c.get("example", "")).rstrip(),
                    analogy=c.get("analogy", ""),
                )
                for c in content_data.get("concepts", [])
            ],
            exercises=[
                Exercise(
                    title=e["title"],
                    description=e["description"],
                    starter_code=str(e.get("starter_code", "")).rstrip(),
                    solution=str(e.get("solution", "")).rstrip(),
                    hints=list(e.get("hints", [])),
                )
                for e in content_data.get("exercises", [])
            ],
            quiz=[_parse_question(q, where) for q in content_data.get("quiz", [])],
        )

        difficulty = data.get("difficulty", "beginner")
        if difficulty not in DIFFICULTIES:
            raise CatalogError(f"{where}: unknown difficulty '{difficulty}'")

        return Module(
            id=module_id,
            title=data["title"],
            description=data.get("description", ""),
            difficulty=difficulty,
            estimated_time=str(data.get("estimated_time", "")),
            order_index=int(data.get("order_index", module_id)),
            content=content,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"Invalid module entry {data.get('id', '?')!r}: {e}") from e


def load_catalog(path: Path) -> ModuleCatalog:
    """Load and validate the module catalog.

    Args:
        path: Path to the catalog YAML file

    Returns:
        ModuleCatalog with modules ordered by order_index

    Raises:
        CatalogError: If the file is missing, unparsable, or has duplicate ids
    """
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise CatalogError(f"Catalog file is not valid YAML: {e}") from e

    modules = [_parse_module(m) for m in data.get("modules", [])]

    seen: set[int] = set()
    for module in modules:
        if module.id in seen:
            raise CatalogError(f"Duplicate module id {module.id}")
        seen.add(module.id)

    catalog = ModuleCatalog(modules)
    logger.info("catalog_loaded", path=str(path), modules=len(catalog))
    return catalog
