import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roulette.catalog import Catalog, Phrase, Pizza


@pytest.fixture
def small_catalog() -> Catalog:
    return Catalog(
        pizzas=(
            Pizza("Kvess", "ost, tomatsaus, skinke og sjampinjong", "oregano"),
            Pizza("Margherita", "ost og tomatsaus", "basilikum", vegetarian=True),
            Pizza("Hagen", "vegansk ost og grønnsaker", "hvitløksolje", vegan=True, vegetarian=True),
            Pizza("Vegansk Mini", "vegansk ost", "", vegan=True, vegetarian=True, personal=True),
            Pizza("Liten Pepperoni", "ost og pepperoni", "chili", personal=True),
        ),
        phrases=(Phrase("Hjulet har talt:"), Phrase("Skjebnen din er")),
    )
