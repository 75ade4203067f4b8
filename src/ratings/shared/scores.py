"""Dimension scores value object and the composite score calculator.

A review is rated on four dimensions, each in [0.00, 5.00]. The composite
score is their fixed weighted sum, rounded half-up to two decimals:

    0.40 * taste + 0.30 * value + 0.15 * ambiance + 0.15 * service
"""

from decimal import ROUND_HALF_UP, Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float

from ratings.domain import ratings

MIN_DIMENSION = 0.0
MAX_DIMENSION = 5.0

TWO_PLACES = Decimal("0.01")

DIMENSION_WEIGHTS = {
    "taste": Decimal("0.40"),
    "value": Decimal("0.30"),
    "ambiance": Decimal("0.15"),
    "service": Decimal("0.15"),
}


def to_decimal(number) -> Decimal:
    """Convert a float/int/str to Decimal without binary float artefacts."""
    if isinstance(number, Decimal):
        return number
    return Decimal(str(number))


def round_half_up(number, places: Decimal = TWO_PLACES) -> Decimal:
    return to_decimal(number).quantize(places, rounding=ROUND_HALF_UP)


def composite_score(taste, value, ambiance, service) -> float:
    """Weighted composite of the four raw dimensions, rounded half-up to 2 places."""
    raw = {"taste": taste, "value": value, "ambiance": ambiance, "service": service}
    total = sum(
        (to_decimal(raw[name]) * weight for name, weight in DIMENSION_WEIGHTS.items()),
        Decimal("0"),
    )
    return float(round_half_up(total))


@ratings.value_object
class DimensionScores:
    """The four raw ratings a reviewer gives a store, each between 0 and 5."""

    taste: Float(required=True, min_value=MIN_DIMENSION, max_value=MAX_DIMENSION)
    value: Float(required=True, min_value=MIN_DIMENSION, max_value=MAX_DIMENSION)
    ambiance: Float(required=True, min_value=MIN_DIMENSION, max_value=MAX_DIMENSION)
    service: Float(required=True, min_value=MIN_DIMENSION, max_value=MAX_DIMENSION)

    @invariant.post
    def dimensions_have_at_most_two_decimals(self):
        for name in DIMENSION_WEIGHTS:
            number = getattr(self, name)
            if number is not None and to_decimal(number) != round_half_up(number):
                raise ValidationError({name: ["Scores are limited to two decimal places"]})

    @property
    def composite(self) -> float:
        return composite_score(self.taste, self.value, self.ambiance, self.service)
