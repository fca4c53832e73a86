import random

import pytest

from roulette.catalog import (
    Catalog,
    CatalogError,
    EmptySelection,
    Phrase,
    Pizza,
    SpinMode,
    load_catalog,
    pick,
    pick_phrase,
    pick_pizza,
)


def _all_tag_combinations():
    for vegan in (False, True):
        for vegetarian in (False, True):
            for personal in (False, True):
                yield Pizza("p", "d", vegan=vegan, vegetarian=vegetarian, personal=personal)


def test_spin_mode_predicates():
    for pizza in _all_tag_combinations():
        assert SpinMode.ANY.accepts(pizza) is (not pizza.personal)
        assert SpinMode.VEGAN.accepts(pizza) is pizza.vegan
        assert SpinMode.VEGETARIAN.accepts(pizza) is (pizza.vegetarian and pizza.vegan and not pizza.personal)


@pytest.mark.parametrize(
    "command,mode",
    [
        ("spin-any", SpinMode.ANY),
        ("/spin-any", SpinMode.ANY),
        ("/spin-vegan", SpinMode.VEGAN),
        ("spin-vegetarian", SpinMode.VEGETARIAN),
        ("/SPIN-VEGETARIAN", SpinMode.VEGETARIAN),
    ],
)
def test_spin_mode_from_command(command, mode):
    assert SpinMode.from_command(command) is mode


def test_unknown_command_has_no_mode():
    assert SpinMode.from_command("/spin-carnivore") is None
    assert SpinMode.from_command("") is None


def test_bundled_catalog_has_a_pizza_for_every_mode():
    catalog = load_catalog()
    assert catalog.pizzas
    assert catalog.phrases
    for mode in SpinMode:
        assert any(mode.accepts(p) for p in catalog.pizzas), f"no pizza for {mode.value}"


def test_pick_stays_inside_filter_and_covers_every_match(small_catalog):
    rng = random.Random(1234)
    for mode in SpinMode:
        eligible = {p.name for p in small_catalog.pizzas if mode.accepts(p)}
        seen = set()
        for _ in range(200):
            pizza = pick_pizza(small_catalog, mode, rng)
            assert pizza.name in eligible
            seen.add(pizza.name)
        assert seen == eligible


def test_pick_phrase_is_unfiltered(small_catalog):
    rng = random.Random(7)
    seen = {pick_phrase(small_catalog, rng).phrase for _ in range(100)}
    assert seen == {p.phrase for p in small_catalog.phrases}


def test_pick_raises_when_nothing_matches():
    catalog = Catalog(pizzas=(Pizza("Kvess", "skinke"),), phrases=(Phrase("x"),))
    with pytest.raises(EmptySelection):
        pick_pizza(catalog, SpinMode.VEGAN)
    with pytest.raises(EmptySelection):
        pick([], lambda _: True)


def test_load_catalog_from_custom_files(tmp_path):
    pizzas = tmp_path / "pizzas.yaml"
    pizzas.write_text(
        "pizzas:\n"
        "  - name: Hagen\n"
        "    description: grønnsaker\n"
        "    vegan: true\n"
        "    vegetarian: true\n"
        "  - name: Kvess\n"
        "    description: skinke\n"
        "    extra: oregano\n",
        encoding="utf-8",
    )
    phrases = tmp_path / "phrases.yaml"
    phrases.write_text("phrases:\n  - Du fikk\n", encoding="utf-8")

    catalog = load_catalog(pizzas, phrases)

    assert catalog.pizzas == (
        Pizza("Hagen", "grønnsaker", "", vegan=True, vegetarian=True),
        Pizza("Kvess", "skinke", "oregano"),
    )
    assert catalog.phrases == (Phrase("Du fikk"),)


@pytest.mark.parametrize(
    "pizzas_yaml",
    [
        "pizzas: []\n",
        "menu:\n  - name: Kvess\n",
        "pizzas:\n  - name: Kvess\n",
        "pizzas:\n  - just a string\n",
        "pizzas: [unclosed\n",
    ],
)
def test_load_catalog_rejects_bad_pizza_files(tmp_path, pizzas_yaml):
    pizzas = tmp_path / "pizzas.yaml"
    pizzas.write_text(pizzas_yaml, encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(pizzas_path=pizzas)


def test_load_catalog_rejects_missing_and_empty_phrases(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(phrases_path=tmp_path / "missing.yaml")

    phrases = tmp_path / "phrases.yaml"
    phrases.write_text("phrases: []\n", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(phrases_path=phrases)


def test_catalog_is_immutable(small_catalog):
    with pytest.raises(AttributeError):
        small_catalog.pizzas = ()
    with pytest.raises(AttributeError):
        small_catalog.pizzas[0].vegan = True
