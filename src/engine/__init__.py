"""
Fixture generation and bracket advancement for tournaments.
"""
