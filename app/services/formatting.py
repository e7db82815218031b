"""Turns raw PokeAPI records into the display models served by the app."""
from app.models import Ability, Pokemon, PokemonDetails, PokemonSpecies, Stat

DEFAULT_DESCRIPTION = "No description available."
DEFAULT_GENUS = "Unknown"
DEFAULT_COLOR = "gray"

STAT_NAMES = {
    "hp": "HP",
    "attack": "Attack",
    "defense": "Defense",
    "special-attack": "Sp. Atk",
    "special-defense": "Sp. Def",
    "speed": "Speed",
}


def format_name(name: str) -> str:
    """Capitalizes each hyphen-separated word: "mr-mime" -> "Mr Mime"."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def format_stat_name(name: str) -> str:
    return STAT_NAMES.get(name) or format_name(name)


def _english_description(species: PokemonSpecies | None) -> str:
    if species is None:
        return DEFAULT_DESCRIPTION
    entry = next((e for e in species.flavor_text_entries if e.language.name == "en"), None)
    # PokeAPI flavor text carries form feeds from the in-game text
    text = entry.flavor_text.replace("\f", " ") if entry else ""
    return text or DEFAULT_DESCRIPTION


def _english_genus(species: PokemonSpecies | None) -> str:
    if species is None:
        return DEFAULT_GENUS
    entry = next((g for g in species.genera if g.language.name == "en"), None)
    return (entry.genus if entry else "") or DEFAULT_GENUS


def format_pokemon_data(pokemon: Pokemon, species: PokemonSpecies | None = None) -> PokemonDetails:
    """
    Merges a Pokemon record with its (optional) species record into a PokemonDetails.
    Missing species data falls back to the default description, genus, color and zero rates.
    """
    sprites = pokemon.sprites

    return PokemonDetails(
        id=pokemon.id,
        name=pokemon.name,
        display_name=format_name(pokemon.name),
        # Best available image: official artwork, then the default sprite
        image=sprites.other.official_artwork.front_default or sprites.front_default,
        sprite=sprites.front_default,
        types=[slot.type.name for slot in pokemon.types],
        height=pokemon.height / 10,  # decimeters -> meters
        weight=pokemon.weight / 10,  # hectograms -> kilograms
        abilities=[
            Ability(name=format_name(slot.ability.name), is_hidden=slot.is_hidden)
            for slot in pokemon.abilities
        ],
        stats=[
            Stat(name=format_stat_name(slot.stat.name), value=slot.base_stat)
            for slot in pokemon.stats
        ],
        description=_english_description(species),
        genus=_english_genus(species),
        color=(species.color.name if species and species.color else None) or DEFAULT_COLOR,
        capture_rate=(species.capture_rate if species else None) or 0,
        base_happiness=(species.base_happiness if species else None) or 0,
    )
