"""Pokemon scan records used for IV and Ditto checks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PokemonScan:
    """One observation of a Pokemon's stats and display."""

    attack: int = 0
    defense: int = 0
    stamina: int = 0
    level: int = 0
    strong: bool = False
    pokemon: int = 0
    costume: int = 0
    gender: int = 0
    form: int = 0
    cell_weather: int = 0
    confirmed: bool = False

    def compressed_iv(self) -> int:
        """Pack the three IVs into one integer, four bits each."""
        return self.attack | self.defense << 4 | self.stamina << 8

    def must_be_boosted(self) -> bool:
        return 30 < self.level <= 35

    def must_be_unboosted(self) -> bool:
        return self.level <= 5 or self.attack < 4 or self.defense < 4 or self.stamina < 4

    def must_have_rerolled(self, other: PokemonScan) -> bool:
        return (
            self.strong != other.strong
            or self.pokemon != other.pokemon
            or self.costume != other.costume
            or self.gender != other.gender
            or self.form != other.form
        )

    def remove_ditto_aux_info(self) -> None:
        """Drop the display details once they are no longer needed."""
        self.cell_weather = 0
        self.pokemon = 0
        self.costume = 0
        self.gender = 0
        self.form = 0
        self.confirmed = False