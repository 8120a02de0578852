from ..constants import MarkerNamingScheme


def generate_marker_name(index: int, scheme: str = MarkerNamingScheme.ALPHABETIC) -> str:
    """
    Default name for the index-th marker (0-based).

    numeric:    0 -> P1, 1 -> P2, ...
    alphabetic: 0 -> A, 25 -> Z, 26 -> AA, 27 -> AB, ... (spreadsheet columns)
    """
    if scheme == MarkerNamingScheme.NUMERIC:
        return f"P{index + 1}"

    result = ""
    n = index
    while True:
        result = chr(65 + n % 26) + result
        n = n // 26 - 1
        if n < 0:
            break
    return result
