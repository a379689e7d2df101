"""
Parsing of command-line coordinate strings.

Pairs are written "<left><sep><right>", e.g. "1000x750" for image
dimensions or "-1.20,0.35" for a point on the complex plane.
"""


def parse_pair(s, separator, kind=float):
    """
    Parse `s` as a pair of values split at the first `separator`.

    Args:
        s: String such as "400x600" or "1.0,1.5"
        separator: Single separator character
        kind: Callable used to parse each half (default float)

    Returns:
        (left, right) if both halves parse, otherwise None
    """
    index = s.find(separator)
    if index < 0:
        return None
    try:
        return kind(s[:index]), kind(s[index + 1:])
    except ValueError:
        return None


def parse_complex(s):
    """Parse a pair of floats separated by a comma as a complex number."""
    pair = parse_pair(s, ',')
    if pair is None:
        return None
    re, im = pair
    return complex(re, im)


def validate_corners(upper_left, lower_right):
    """
    Check that the corners describe a non-empty, right-handed view.

    Raises:
        ValueError if lower_right is not strictly right of and below upper_left
    """
    if not lower_right.real > upper_left.real:
        raise ValueError(
            f"lower right corner {lower_right} must lie to the right of "
            f"upper left corner {upper_left}"
        )
    if not upper_left.imag > lower_right.imag:
        raise ValueError(
            f"lower right corner {lower_right} must lie below "
            f"upper left corner {upper_left}"
        )


def parse_geometry(pixels, upper_left, lower_right):
    """
    Parse and validate the image size and corner arguments.

    Args:
        pixels: Image size such as "1000x750"
        upper_left, lower_right: Corners such as "-1.20,0.35"

    Returns:
        ((width, height), upper_left, lower_right)

    Raises:
        ValueError naming the argument that could not be used
    """
    bounds = parse_pair(pixels, 'x', int)
    if bounds is None:
        raise ValueError(f"error parsing image dimensions {pixels!r}")
    if bounds[0] <= 0 or bounds[1] <= 0:
        raise ValueError(f"image dimensions must be positive, got {pixels!r}")

    ul = parse_complex(upper_left)
    if ul is None:
        raise ValueError(f"error parsing upper left corner point {upper_left!r}")
    lr = parse_complex(lower_right)
    if lr is None:
        raise ValueError(f"error parsing lower right corner point {lower_right!r}")

    validate_corners(ul, lr)
    return bounds, ul, lr
