import random

import pytest

from roulette.UsageTable import UsageTable
from roulette.catalog import Catalog, EmptySelection, Phrase, Pizza
from roulette.commands import SpinCommandHandler, mention_user, tier_message
from shared.envelope import Acknowledge, CommandResponse, SlashCommand


def command(name="/spin-any", user_id="U1", envelope_id="E1"):
    return SlashCommand(envelope_id=envelope_id, command=name, user_id=user_id)


def block_texts(response):
    return [block["text"]["text"] for block in response.blocks]


def test_tier_messages():
    assert tier_message(0) == "Du har *én gratis* respin igjen."
    assert tier_message(1) == "Du har *ingen gratis* respins igjen."
    assert tier_message(2) == "Du har spunnet 3 ganger. Straffer: 🍺"
    assert tier_message(4) == "Du har spunnet 5 ganger. Straffer: 🍺🍺🍺"


def test_mention_user():
    assert mention_user("U42") == "<@U42>"


def test_first_spin_gets_free_respin_message(small_catalog):
    usage = UsageTable()
    handler = SpinCommandHandler(small_catalog, usage, random.Random(3))

    response = handler.handle(command("spin-any", user_id="U1", envelope_id="E1"))

    assert isinstance(response, CommandResponse)
    assert response.envelope_id == "E1"
    assert response.response_type == "in_channel"
    headline, body, tier = block_texts(response)
    assert headline.startswith("<@U1> ")
    assert headline.endswith(" 🎉")
    assert tier == "Du har *én gratis* respin igjen."
    assert body.startswith("Pizzaen består av ")
    assert usage.count_for("U1") == 1


def test_response_names_pizza_phrase_and_ingredients():
    catalog = Catalog(
        pizzas=(Pizza("Kvess", "ost, tomatsaus og skinke", "oregano"),),
        phrases=(Phrase("Hjulet har talt:"),),
    )
    handler = SpinCommandHandler(catalog)

    headline, body, _ = block_texts(handler.handle(command(user_id="U7")))

    assert headline == "<@U7> Hjulet har talt: *Kvess* 🎉"
    assert body == "Pizzaen består av ost, tomatsaus og skinke (oregano)"


def test_repeat_spins_escalate(small_catalog):
    handler = SpinCommandHandler(small_catalog, UsageTable(), random.Random(5))
    tiers = [block_texts(handler.handle(command(envelope_id=f"E{i}")))[2] for i in range(4)]
    assert tiers == [
        "Du har *én gratis* respin igjen.",
        "Du har *ingen gratis* respins igjen.",
        "Du har spunnet 3 ganger. Straffer: 🍺",
        "Du har spunnet 4 ganger. Straffer: 🍺🍺",
    ]


def test_users_are_counted_separately(small_catalog):
    usage = UsageTable()
    handler = SpinCommandHandler(small_catalog, usage)
    handler.handle(command(user_id="U1"))
    handler.handle(command(user_id="U1"))
    handler.handle(command(user_id="U2"))
    assert usage.count_for("U1") == 2
    assert usage.count_for("U2") == 1


def test_vegan_spin_only_lands_on_vegan_pizzas(small_catalog):
    handler = SpinCommandHandler(small_catalog, UsageTable(), random.Random(11))
    vegan_names = {p.name for p in small_catalog.pizzas if p.vegan}
    for i in range(30):
        headline = block_texts(handler.handle(command("/spin-vegan", envelope_id=f"E{i}")))[0]
        assert any(f"*{name}*" in headline for name in vegan_names)


def test_unknown_command_is_acknowledged_without_counting(small_catalog):
    usage = UsageTable()
    handler = SpinCommandHandler(small_catalog, usage)

    response = handler.handle(command("/spin-carnivore", user_id="U1", envelope_id="E5"))

    assert response == Acknowledge(envelope_id="E5")
    assert usage.count_for("U1") == 0


def test_empty_selection_propagates_and_is_not_counted():
    catalog = Catalog(pizzas=(Pizza("Kvess", "skinke"),), phrases=(Phrase("x"),))
    usage = UsageTable()
    handler = SpinCommandHandler(catalog, usage)
    with pytest.raises(EmptySelection):
        handler.handle(command("/spin-vegetarian"))
    assert usage.count_for("U1") == 0
