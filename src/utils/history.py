from src.models.turn import Turn


def order_turns(turns: list[Turn]) -> list[Turn]:
    """Return a new list of turns sorted oldest-first by saidAt.

    The store returns a thread's turns in no particular order, so callers must
    sort before handing them to the LLM. Equal timestamps keep store order.
    """
    return sorted(turns, key=lambda turn: turn.said_at)


def partition_window(turns: list[Turn], size: int) -> tuple[list[Turn], list[Turn]]:
    """Split a thread into (retained, overflow).

    Retained is the `size` most recent turns, oldest-first. Overflow is every
    earlier turn. Neither list aliases the input.
    """
    if size < 1:
        raise ValueError(f"Window size must be at least 1, got {size}")
    ordered = order_turns(turns)
    cut = max(len(ordered) - size, 0)
    return ordered[cut:], ordered[:cut]
