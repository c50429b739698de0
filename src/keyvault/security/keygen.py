"""Human-readable secrets that can be read aloud or typed from memory."""
import secrets

ADJECTIVES = [
    "iron", "swift", "bright", "silver", "golden", "brave", "wise", "calm",
    "bold", "dark", "light", "fierce", "gentle", "mighty", "quiet", "strong",
]

NOUNS = [
    "sparrow", "tiger", "eagle", "wolf", "dragon", "phoenix", "lion", "bear",
    "falcon", "hawk", "raven", "owl", "fox", "lynx", "panther", "leopard",
]

WORDS = [
    "echo", "flame", "storm", "wave", "wind", "shadow", "light", "stone",
    "thunder", "frost", "blaze", "mist", "dawn", "dusk", "star", "moon",
]


def generate_human_key(word_count: int = 3) -> str:
    """
    Return a secret like ``iron-sparrow-echo``.

    Each word adds 4 bits of entropy, so the default three words give only
    4096 combinations; pass a larger ``word_count`` for anything sensitive.
    Words beyond the third are drawn from ``WORDS``.
    """
    if word_count < 1:
        raise ValueError("word_count must be at least 1")
    pools = [ADJECTIVES, NOUNS] + [WORDS] * max(word_count - 2, 1)
    return "-".join(secrets.choice(pool) for pool in pools[:word_count])
