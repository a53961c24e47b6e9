"""
Registry of tracked addresses and known NFT collections.

The Registry is built once at startup (from the built-in tables below or from
a JSON file) and passed explicitly to every component that needs it.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from mintprofit.errors import CollectionLookupError

# Configure module logger
logger = logging.getLogger(__name__)


DEFAULT_COLLECTIONS: dict[str, str] = {
    "terra1uv9w7aaq6lu2kn0asnvknlcgg2xd5ts57ss7qt": "HellCats",
    "terra1nyqyxamvuhtd8h756tkqsejc7plj6lr5gdfj5e": "LUNI",
    "terra1ggv86dkuzmky7ww20s2uvm6pl2jvl9mv0z6zyt": "DystopAI",
    "terra1cefmm3msvp2erknw54zjlnh39e5lww685nzl50": "Fake Luna Shield",
    "terra1qpu42s4hrrnvxsxr428scd5st9zd4fmn5me38t": "Luna Shield",
    "terra1p4mlfdwm4h0hvyv0c64kmj3afs5zzj3t2jszvw": "COL",
    "terra1h9rhu457nllgrh4w8rcmc2exv6nvfcjdnd30j0": "Silent Solohs",
    "terra1l94ukqc5c3tqjgkvawx5cngf7uq5nz808h6kwf": "TerraBay | Ronins",
    "terra1vdwz6zlrk6ptsxu97dk43uup9frchuwse8s6d8": "ArtsyApes",
    "terra1whyze49j9d0672pleaflk0wfufxrh8l0at2h8q": "Terranauts",
    "terra1k5pa7htlznr7hskhr9dx8qlk65emhktrgmuknd": "Tesseract",
    "terra1chu9s72tqguuzgn0tr6rhwvnrgcgzme73y5l4x": "Skeleton Punks",
    "terra1x8m8vju636xh7026dehq6g7ye66tn0yu4c7mq8": "Rekt Wolf",
    "terra1d8m6k7ww7x0zcedq8gqckn0ez863a75p0ckwla": "Luna Lions",
    "terra1stzp2dlwceqh6k6cffv4zj64ddx28rdgpdal74": "MutantZ",
    "terra1ygy58urzh826al6ktlskh4z6hnd2aunhcn0cvm": "Galactic Gridz",
    "terra1pw0x4f7ktv4vdqvx8dfaa5d2lp0t5rpzep9ewn": "MintDAO NFT",
    "terra1my4sy2gt5suu9fgt8wdkm7ywrd5jzg86692as2": "Anarchists on Terra",
    "terra1alskwhl7x6gteuqkw7z9pexw4v9hr78mh0r6da": "Astro Heroes",
    "terra14aykuyg03462at2tpnua7tnhk7p0dr7wexepnh": "LUNILAND Plots #1",
    "terra1njclu68srjlprwnj80wrs5pyyp2rksecedtypp": "Genesis Wolves",
    "terra13fz4lrx6z952phcjjqzzacavnhxq2u5vt402vj": "LUNITA",
    "terra17hsdmscnz0y24d5zn7k4tsru9clyazp8cwtd44": "GraviCats",
    "terra1qz4ada96pqtxm0pg7gz4ttulv6cj7mjc4vdyl2": "HellHounds",
    "terra1ynr8vav5anknl67nfgnhqvj4dj0wqj7tsaemc6": "Unstables: Aliens of Luna",
}

DEFAULT_OTHER_ADDRESSES: tuple[str, ...] = (
    "terra16rtjuzwwvqdwuslevcp09jdxwqqgwpdghdy5sw",
    "terra1em70vvqc9kf9qatzuyr60mgzzwjzz834n599rq",
    "terra1s6kp590lh66kat73zlxg3y3va9990p4mnnxuek",
    "terra1qjz84ygvtn0vcm4g4xnm023m4d8hze50286jh9",
    "terra1mzvfz6zhprchqwluux9zz42x2xua0p8qekxg0z",
    "terra1pwsunmtya0z7kgd59v6eu7q08udnyrrazn3ht5",
    "terra1vqxe3r46vem2y7c0puz6yfhdc2zrhwtzg3ceug",
)

DEFAULT_BOT_ADDRESSES: tuple[str, ...] = (
    "terra1mvd3ca3h6gcljq4ntvakh23kjk3wyhk4z0tu2m",
    "terra1j0mwwkk49r0mml23tek30ueanr93750vpmuswt",
    "terra15a8wa7erj6ajvsswyvxdjfe4dm3nrnh96c6m4u",
    "terra1x9s9qgdsdaxhh3df9kcnqe5dyyzz2q5smragv2",
    "terra1ala6zs487f6trrt504az0syfsttd029xuhnh6q",
    "terra1nucq3q83yhmnnt2uteaykh0kksfu9y65nrvex9",
    "terra1ljnhx8f644c60r6jz628p9k67us4r2kg9s4g7d",
    "terra1jn9eu45fgdxfwmq3y9afdd9x2dmgt45r78lccy",
    "terra12fyk2wrwygg7054js9t3hj6rrn2ccd6z2grshp",
    "terra1xymaerjna07yv7e32u7vfvhs7594wczh6ffflt",
    "terra138xnes8d4835ds6sk4wsf44x583485rv4z4htl",
    "terra1z6tpjlhvhl6dv2djm52vcdkw2amv637s43cpsl",
    "terra1wz6lp9ayf35k8cdxesmyrydxxeglyptxhwg9e8",
    "terra19682etxsay8h4lrff5cg70adh0mmjm3ctamy7n",
    "terra1d3hl5s4ncu6e02u560hjaevq9slffwrswd4g4r",
    "terra1jg3wnmd8fxgdhtmpnwnz6dgxeuvk8a9nxya037",
    "terra1mkmm846a97phqlr9zpu94phjqvwegja66pufh0",
    "terra159zpdxf07yhe7szkmhy9qwqwm7e6m3yljch2qu",
    "terra1v9agdxx8pcsd9734n79f3yg9wh4e3ft2vnlnwv",
    "terra1tyccxuq2kuyn44zxsy8jupednquyq04547w0hh",
    "terra1hgj4ar7a28el4hqgdndkruvl7shemjvjqd2cfr",
    "terra18zvr67rf26q24aclzpkc4ed98usq9sm9wny96d",
    "terra1weh2q3utyhfpt8j36v5yp0nyhcl2r8hu2zkusc",
    "terra1t38xtlz0huywh8h5c74pnzwcntajyn5aajzekn",
    "terra1nwgcam5fxtradcxcmpy3x3nus7g258wtg2f3ze",
    "terra138turxsmh3q462264let7h4pz9dkyk7fvnf0yj",
    "terra1ft3yzexjnl6ryfz4f277k9haus4xykqt0ge3ee",
    "terra1ry0c33tsaqfxd4hdwmx8z2l5awk728cphx8rwj",
    "terra138vryeyjsalhefcv0acf9pjjapfpet096r9n30",
    "terra1vc4c3gjduhptqvfzjr2xml9skwyte7y759j0ey",
)


@dataclass(frozen=True)
class Registry:
    """
    Immutable set of tracked addresses and registered collections.

    Attributes:
        bot_addresses: Addresses that mint (and may sell)
        other_addresses: Operator addresses that only sell
        collections: Contract identifier -> collection display name
    """
    bot_addresses: tuple[str, ...]
    other_addresses: tuple[str, ...]
    collections: Mapping[str, str]

    def __post_init__(self):
        overlap = set(self.bot_addresses) & set(self.other_addresses)
        if overlap:
            raise ValueError(f"Addresses registered as both bot and other: {sorted(overlap)}")

        if len(set(self.bot_addresses)) != len(self.bot_addresses):
            raise ValueError("Duplicate bot address in registry")

        if len(set(self.other_addresses)) != len(self.other_addresses):
            raise ValueError("Duplicate other address in registry")

        # Sales are joined to mints by display name, so names must be unique
        names = list(self.collections.values())
        if len(set(names)) != len(names):
            duplicates = sorted({name for name in names if names.count(name) > 1})
            raise ValueError(f"Collection display names must be unique: {duplicates}")

        object.__setattr__(self, "collections", MappingProxyType(dict(self.collections)))

    @property
    def all_addresses(self) -> tuple[str, ...]:
        """Every tracked address, other addresses first, then bots."""
        return self.other_addresses + self.bot_addresses

    def is_bot(self, address: str) -> bool:
        return address in self.bot_addresses

    def collection_name(self, contract_id: str) -> str:
        """
        Resolve a collection contract identifier to its display name.

        Raises:
            CollectionLookupError: If the contract is not registered
        """
        try:
            return self.collections[contract_id]
        except KeyError:
            raise CollectionLookupError(f"Collection not found: {contract_id}") from None


def default_registry() -> Registry:
    """Registry of the built-in bot fleet and collection list."""
    return Registry(
        bot_addresses=DEFAULT_BOT_ADDRESSES,
        other_addresses=DEFAULT_OTHER_ADDRESSES,
        collections=DEFAULT_COLLECTIONS,
    )


def load_registry(path: Optional[Path] = None) -> Registry:
    """
    Build the Registry from a JSON file, or the built-in tables if no path is given.

    The file holds "bot_addresses" and "other_addresses" lists and a
    "collections" object mapping contract identifiers to display names.

    Args:
        path: Path to a registry JSON file

    Returns:
        Registry instance

    Raises:
        ValueError: If the file is malformed or violates registry invariants
    """
    if path is None:
        registry = default_registry()
    else:
        logger.info(f"Loading registry from {path}")
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        try:
            registry = Registry(
                bot_addresses=tuple(data["bot_addresses"]),
                other_addresses=tuple(data.get("other_addresses", [])),
                collections=dict(data["collections"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed registry file {path}: {e}") from e

    logger.info(
        f"Registry: {len(registry.bot_addresses)} bot addresses, "
        f"{len(registry.other_addresses)} other addresses, "
        f"{len(registry.collections)} collections"
    )
    return registry
