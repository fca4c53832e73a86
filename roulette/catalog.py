"""
Pizza and phrase catalogs plus the random selection over them.

The catalog is loaded once from YAML at startup into an immutable snapshot
and handed explicitly to whoever needs it.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

import yaml

from shared.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_PIZZAS_PATH = DATA_DIR / "pizzas.yaml"
DEFAULT_PHRASES_PATH = DATA_DIR / "phrases.yaml"


class CatalogError(Exception):
    """Raised when a catalog file is missing, malformed or empty."""
    pass


class EmptySelection(Exception):
    """Raised when no catalog entry matches a filter. Means the catalog is misauthored."""
    pass


@dataclass(frozen=True)
class Pizza:
    name: str
    description: str
    extra: str = ""
    vegan: bool = False
    vegetarian: bool = False
    personal: bool = False


@dataclass(frozen=True)
class Phrase:
    phrase: str


@dataclass(frozen=True)
class Catalog:
    pizzas: Tuple[Pizza, ...]
    phrases: Tuple[Phrase, ...]


class SpinMode(str, Enum):
    """Which pizzas a spin may land on."""

    ANY = "any"
    VEGAN = "vegan"
    VEGETARIAN = "vegetarian"

    @classmethod
    def from_command(cls, command: str) -> Optional[SpinMode]:
        """Map a slash command keyword such as ``/spin-vegan`` to a mode, or None."""
        return _COMMANDS.get(command.strip().lstrip("/").lower())

    def accepts(self, pizza: Pizza) -> bool:
        if self is SpinMode.ANY:
            return not pizza.personal
        if self is SpinMode.VEGAN:
            # Vegan pizzas are personal-size on the menu
            return pizza.vegan
        return pizza.vegetarian and pizza.vegan and not pizza.personal


_COMMANDS = {
    "spin-any": SpinMode.ANY,
    "spin-vegan": SpinMode.VEGAN,
    "spin-vegetarian": SpinMode.VEGETARIAN,
}


def pick(entries: Sequence[T], predicate: Callable[[T], bool], rng: Any = random) -> T:
    """
    Uniformly pick one entry among those matching ``predicate``.

    Raises:
        EmptySelection: nothing matches
    """
    matches = [entry for entry in entries if predicate(entry)]
    if not matches:
        raise EmptySelection(f"No entry out of {len(entries)} matches the filter")
    return rng.choice(matches)


def pick_pizza(catalog: Catalog, mode: SpinMode, rng: Any = random) -> Pizza:
    try:
        return pick(catalog.pizzas, mode.accepts, rng)
    except EmptySelection as e:
        raise EmptySelection(f"No pizza for spin mode {mode.value!r}") from e


def pick_phrase(catalog: Catalog, rng: Any = random) -> Phrase:
    return pick(catalog.phrases, lambda _: True, rng)


# ========================================
#           LOADING
# ========================================

def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {path}: {e}") from e


def _entries(data: Any, key: str, path: Path) -> list:
    entries = data.get(key) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise CatalogError(f"{path} must contain a '{key}' list")
    if not entries:
        raise CatalogError(f"{path} has no {key}")
    return entries


def _parse_pizza(entry: Any, index: int, path: Path) -> Pizza:
    if not isinstance(entry, dict):
        raise CatalogError(f"{path}: pizza #{index} must be a mapping")
    name = entry.get("name")
    description = entry.get("description")
    if not isinstance(name, str) or not isinstance(description, str):
        raise CatalogError(f"{path}: pizza #{index} needs 'name' and 'description'")
    return Pizza(
        name=name,
        description=description,
        extra=str(entry.get("extra") or ""),
        vegan=bool(entry.get("vegan", False)),
        vegetarian=bool(entry.get("vegetarian", False)),
        personal=bool(entry.get("personal", False)),
    )


def load_catalog(pizzas_path: Optional[Path] = None, phrases_path: Optional[Path] = None) -> Catalog:
    """
    Load pizzas and phrases from YAML. Defaults to the bundled files.

    Raises:
        CatalogError: a file is missing or malformed, or a collection is empty
    """
    pizzas_path = Path(pizzas_path or DEFAULT_PIZZAS_PATH)
    phrases_path = Path(phrases_path or DEFAULT_PHRASES_PATH)

    pizzas = tuple(
        _parse_pizza(entry, i, pizzas_path)
        for i, entry in enumerate(_entries(_read_yaml(pizzas_path), "pizzas", pizzas_path))
    )

    phrases = []
    for i, entry in enumerate(_entries(_read_yaml(phrases_path), "phrases", phrases_path)):
        if not isinstance(entry, str) or not entry.strip():
            raise CatalogError(f"{phrases_path}: phrase #{i} must be a non-empty string")
        phrases.append(Phrase(entry))

    logger.info("Loaded %d pizzas and %d phrases", len(pizzas), len(phrases))
    return Catalog(pizzas=pizzas, phrases=tuple(phrases))
