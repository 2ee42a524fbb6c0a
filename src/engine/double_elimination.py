"""
Double elimination bracket generation.

In double elimination:
- Winners Bracket: Teams that haven't lost yet, built as a single elimination bracket
- Losers Bracket: Teams that have lost once, slots filled as results come in
- Grand Final: Winners bracket champion vs Losers bracket champion
"""
from typing import List

from .elimination import calculate_rounds, generate_single_elimination_fixtures
from .models import BRACKET_FINAL, BRACKET_LOSERS, BRACKET_WINNERS, Match, Participant


def get_losers_round_name(round_num: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (1-indexed)."""
    rounds_from_end = total_losers_rounds - round_num
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_num}"


def losers_round_match_count(round_num: int) -> int:
    """Matches in losers round `round_num` (1-indexed): 2 ** floor((r + 1) / 2)."""
    return 2 ** ((round_num + 1) // 2)


def calculate_losers_bracket_rounds(num_teams: int) -> int:
    """One losers round fewer than the winners bracket has rounds."""
    return max(0, calculate_rounds(num_teams) - 1)


def generate_losers_bracket(num_teams: int, category: str) -> List[Match]:
    fixtures = []
    for round_num in range(1, calculate_losers_bracket_rounds(num_teams) + 1):
        for i in range(losers_round_match_count(round_num)):
            fixtures.append(Match(
                id=f"L_{category}_R{round_num}_M{i + 1}",
                round=round_num,
                match_number=i + 1,
                category=category,
                bracket=BRACKET_LOSERS,
            ))
    return fixtures


def generate_double_elimination_fixtures(participants: List[Participant], category: str) -> List[Match]:
    """
    Generate winners bracket, losers bracket and grand final for a category.

    The winners bracket is a seeded single elimination bracket; losers
    bracket and grand final start with every slot empty.
    """
    entrants = [p for p in participants if p.category == category]
    rounds = max(1, calculate_rounds(len(entrants)))

    winners = generate_single_elimination_fixtures(entrants, category, id_prefix='W_',
                                                   bracket=BRACKET_WINNERS)
    losers = generate_losers_bracket(len(entrants), category)
    grand_final = Match(
        id=f"F_{category}_Final",
        round=rounds + 1,
        match_number=1,
        category=category,
        bracket=BRACKET_FINAL,
    )
    return winners + losers + [grand_final]
