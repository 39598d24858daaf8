"""Random choices made while building a practice batch.

Every helper takes the engine's ``random.Random`` so a seeded instance makes
a whole session reproducible.
"""

SIDE_DEFINITION = 'definition'
SIDE_WORD = 'word'


def choose_meaning(rng, word):
    """Pick one of the word's candidate meanings uniformly."""
    meanings = word.get('meanings') or []
    if not meanings:
        return None
    return rng.choice(meanings)


def choose_example(rng, meaning):
    examples = [e for e in (meaning.get('examples') or []) if e]
    if not examples:
        return None
    return rng.choice(examples)


def choose_initial_side(rng):
    return SIDE_DEFINITION if rng.random() < 0.5 else SIDE_WORD
