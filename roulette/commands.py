from __future__ import annotations

import random
from typing import Any, Optional

from roulette.UsageTable import UsageTable
from roulette.catalog import Catalog, SpinMode, pick_phrase, pick_pizza
from shared.envelope import Acknowledge, CommandResponse, OutboundMessage, SlashCommand, section_block
from shared.log import log_envelope, get_logger

logger = get_logger(__name__)


def mention_user(user_id: str) -> str:
    return f"<@{user_id}>"


def tier_message(previous_spins: int) -> str:
    """Feedback text chosen from how many times the user already spun."""
    if previous_spins == 0:
        return "Du har *én gratis* respin igjen."
    if previous_spins == 1:
        return "Du har *ingen gratis* respins igjen."
    penalties = "\U0001F37A" * (previous_spins - 1)
    return f"Du har spunnet {previous_spins + 1} ganger. Straffer: {penalties}"


class SpinCommandHandler:
    """Answers ``/spin-*`` slash commands with a random pizza."""

    def __init__(self, catalog: Catalog, usage: Optional[UsageTable] = None, rng: Any = random):
        self.catalog = catalog
        self.usage = usage if usage is not None else UsageTable()
        self.rng = rng

    def handle(self, command: SlashCommand) -> Optional[OutboundMessage]:
        """
        Build the reply for one slash command.

        Unknown commands are acknowledged without a payload so Slack stops
        waiting on the envelope.

        Raises:
            EmptySelection: the catalog has no pizza for the requested mode
        """
        mode = SpinMode.from_command(command.command)
        if mode is None:
            log_envelope(logger, "warning", f"Received unknown command: {command.command}", message=command)
            return Acknowledge(envelope_id=command.envelope_id)

        pizza = pick_pizza(self.catalog, mode, self.rng)
        phrase = pick_phrase(self.catalog, self.rng)

        spins = self.usage.count_for(command.user_id)
        spin_msg = tier_message(spins)
        self.usage.record_spin(command.user_id)

        log_envelope(logger, "info", f"Spun {pizza.name} ({mode.value})", message=command)

        blocks = [
            section_block(f"{mention_user(command.user_id)} {phrase.phrase} *{pizza.name}* \U0001F389"),
            section_block(f"Pizzaen består av {pizza.description} ({pizza.extra})"),
            section_block(spin_msg),
        ]
        return CommandResponse(envelope_id=command.envelope_id, blocks=blocks)
