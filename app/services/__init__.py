"""Service layer: aggregation of PokeAPI data into display models."""
from .pokemon_service import PokemonService

__all__ = [
    'PokemonService',
]
