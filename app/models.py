from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


# --- Raw PokeAPI data (Internal Contract) ---

class NamedResource(BaseModel):
    name: str
    url: str = ""


class NamedResourceList(BaseModel):
    count: int
    results: list[NamedResource] = []


class TypePokemonSlot(BaseModel):
    pokemon: NamedResource


class TypeDetail(BaseModel):
    name: str
    pokemon: list[TypePokemonSlot] = []


class ArtworkSprites(BaseModel):
    front_default: str | None = None


class OtherSprites(BaseModel):
    # PokeAPI uses hyphenated keys here
    official_artwork: ArtworkSprites = Field(default_factory=ArtworkSprites, alias="official-artwork")


class Sprites(BaseModel):
    front_default: str | None = None
    other: OtherSprites = Field(default_factory=OtherSprites)


class PokemonTypeSlot(BaseModel):
    slot: int = 0
    type: NamedResource


class PokemonAbilitySlot(BaseModel):
    ability: NamedResource
    is_hidden: bool = False


class PokemonStatSlot(BaseModel):
    stat: NamedResource
    base_stat: int


class Pokemon(BaseModel):
    id: int
    name: str
    sprites: Sprites = Field(default_factory=Sprites)
    types: list[PokemonTypeSlot] = []
    abilities: list[PokemonAbilitySlot] = []
    stats: list[PokemonStatSlot] = []
    height: int = 0  # decimeters
    weight: int = 0  # hectograms


class FlavorTextEntry(BaseModel):
    flavor_text: str
    language: NamedResource


class GenusEntry(BaseModel):
    genus: str
    language: NamedResource


class PokemonSpecies(BaseModel):
    capture_rate: int | None = None
    base_happiness: int | None = None
    color: NamedResource | None = None
    flavor_text_entries: list[FlavorTextEntry] = []
    genera: list[GenusEntry] = []


# --- Public API responses (camelCase on the wire) ---

class DisplayModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Ability(DisplayModel):
    name: str
    is_hidden: bool


class Stat(DisplayModel):
    name: str
    value: int


class PokemonDetails(DisplayModel):
    id: int
    name: str
    display_name: str
    image: str | None
    sprite: str | None
    types: list[str]
    height: float  # meters
    weight: float  # kilograms
    abilities: list[Ability]
    stats: list[Stat]
    description: str
    genus: str
    color: str
    capture_rate: int
    base_happiness: int


class PokemonType(DisplayModel):
    name: str
    display_name: str


class PokemonPage(DisplayModel):
    pokemon: list[PokemonDetails]
    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


# Same paging structure, tagged with the type it was filtered by
class TypePokemonPage(PokemonPage):
    type: str


class SearchResult(DisplayModel):
    pokemon: list[PokemonDetails]
    total_count: int


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ApiErrorResponse(BaseModel):
    success: bool = False
    error: str
