from decimal import Decimal, ROUND_HALF_UP
from typing import Union


def round_half_up(value: float, places: int = 0) -> Union[int, float]:
    """
    Round exact halves away from zero, as client-side percentage and rating
    displays do (12.5 -> 13, 4.125 -> 4.13).

    Works on the exact binary value of the float. Returns an int when places is 0.
    """
    rounded = Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)
