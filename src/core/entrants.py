"""
Entrant list parsing.
"""
import re
from typing import List


DEFAULT_SAMPLE = "\n".join([
    "Coffee",
    "Tea",
    "Hot Chocolate",
    "Espresso",
    "Latte",
    "Cappuccino",
    "Matcha",
    "Chai",
    "Mocha",
    "Americano",
    "Cortado",
])


def parse_entrants(text: str) -> List[str]:
    """Split pasted text into entrant names, one per line, skipping blank lines."""
    if not text:
        return []
    names = []
    for line in re.split(r'\r?\n', text):
        name = line.strip()
        if name:
            names.append(name)
    return names
