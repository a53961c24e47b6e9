from decimal import Decimal

import pytest

from factories import BOT_A, BOT_B, COLLECTION_X, COLLECTION_Y, OTHER
from mintprofit.price_oracle import FixedPriceOracle
from mintprofit.registry import Registry


@pytest.fixture
def registry():
    return Registry(
        bot_addresses=(BOT_A, BOT_B),
        other_addresses=(OTHER,),
        collections={COLLECTION_X: "Collection X", COLLECTION_Y: "Collection Y"},
    )


@pytest.fixture
def oracle():
    return FixedPriceOracle({"uluna": Decimal("80")})
