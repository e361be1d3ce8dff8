"""Input validators used by the launch prompts."""

import re

from scriptcli.errors import ValidationError


SIZE_UNITS = ("MB", "MiB", "GB", "GiB", "TB", "TiB")

_INTEGER = re.compile(r"[+-]?[0-9]+")


def validate_size(size: str) -> None:
    """Validate a disk or memory size such as ``20GiB``.

    Raises ValidationError when the unit is missing or the magnitude is not
    a positive integer.
    """
    if size == "":
        raise ValidationError("size cannot be empty")

    magnitude = None
    for unit in SIZE_UNITS:
        if size.endswith(unit):
            magnitude = size[:-len(unit)]
            break
    if magnitude is None:
        raise ValidationError("size must have a valid unit (MB, MiB, GB, GiB, TB, TiB)")

    if not _INTEGER.fullmatch(magnitude):
        raise ValidationError("size must be a valid number")
    if int(magnitude) <= 0:
        raise ValidationError("size must be greater than 0")
