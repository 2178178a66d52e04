"""
Cards, decks, seeded randomness and line-oriented IO shared by the War engine
and its tooling.
"""
