from typing import Callable


def take(*keys: str) -> Callable[[dict], list]:
    """Return a function that lists a record's values in ``keys`` order.

    Missing keys yield ``None`` so the positional layout always matches
    the parameter list of the stored procedure it feeds.
    """
    def pick(record: dict) -> list:
        return [record.get(key) for key in keys]
    return pick
