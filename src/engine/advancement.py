"""
Advancement of winners (and semifinal losers) into later matches.

The bracket is modelled as a graph: every match that feeds another gets a
list of forward edges built once from the fixture list. Propagation walks
those edges and only ever writes into empty slots, so applying it again
after a retried save changes nothing. Correcting a score first takes the
old result back out of downstream matches that have not been played.
"""
import logging
from typing import Dict, Iterable, List, Optional

from .exceptions import BracketStructureError, InvalidInputError
from .elimination import feeder_target
from .formats import TournamentFormat
from .groups import parse_score
from .models import (BRACKET_FINAL, BRACKET_WINNERS, FINAL, QUARTER_FINAL, SEMI_FINAL,
                     STAGE_PLAYOFF, THIRD_PLACE, Match, is_placeholder)

logger = logging.getLogger(__name__)


CARRY_WINNER = 'winner'
CARRY_LOSER = 'loser'


class Edge:
    """`source` match sends its winner (or loser) into `slot` of `target`."""

    def __init__(self, source: Match, target: Match, slot: str, carries: str = CARRY_WINNER):
        self.source = source
        self.target = target
        self.slot = slot
        self.carries = carries

    def __repr__(self):
        return f"Edge({self.source.id} -[{self.carries}]-> {self.target.id}.{self.slot})"


def _by_match_number(matches: Iterable[Match]) -> List[Match]:
    return sorted(matches, key=lambda m: m.match_number)


class BracketGraph:
    """Arena of matches with precomputed forward edges."""

    def __init__(self):
        self.matches: Dict[str, Match] = {}
        self.edges: Dict[str, List[Edge]] = {}

    @classmethod
    def build(cls, fixtures: List[Match], formats: Optional[Dict[str, str]] = None) -> 'BracketGraph':
        """
        Index `fixtures` and wire their dependencies.

        Playoff matches are wired per (category, cup). Elimination brackets are
        wired for categories whose format in `formats` is single or double
        elimination.
        """
        graph = cls()
        for match in fixtures:
            graph.matches[match.id] = match

        partitions: Dict[tuple, List[Match]] = {}
        for match in fixtures:
            if match.stage == STAGE_PLAYOFF and match.playoff_round:
                partitions.setdefault((match.category, match.cup), []).append(match)
        for matches in partitions.values():
            graph._wire_playoffs(matches)

        for category, fmt in (formats or {}).items():
            if TournamentFormat.is_elimination(fmt):
                graph._wire_elimination([m for m in fixtures if m.category == category and not m.stage])

        return graph

    def add_edge(self, source: Match, target: Match, slot: str, carries: str = CARRY_WINNER):
        self.edges.setdefault(source.id, []).append(Edge(source, target, slot, carries))

    def _wire_playoffs(self, matches: List[Match]):
        rounds = {}
        for match in matches:
            rounds.setdefault(match.playoff_round, []).append(match)
        quarterfinals = _by_match_number(rounds.get(QUARTER_FINAL, []))
        semifinals = _by_match_number(rounds.get(SEMI_FINAL, []))
        finals = _by_match_number(rounds.get(FINAL, []))
        third_places = _by_match_number(rounds.get(THIRD_PLACE, []))

        # QF 2k-1 and 2k feed SF k
        for position, quarterfinal in enumerate(quarterfinals):
            semifinal_index = position // 2
            if semifinal_index < len(semifinals):
                slot = 'player1' if position % 2 == 0 else 'player2'
                self.add_edge(quarterfinal, semifinals[semifinal_index], slot)

        # first semifinal feeds player1 of the final and 3rd place match, second feeds player2
        for position, semifinal in enumerate(semifinals[:2]):
            slot = 'player1' if position == 0 else 'player2'
            if finals:
                self.add_edge(semifinal, finals[0], slot)
            if third_places:
                self.add_edge(semifinal, third_places[0], slot, CARRY_LOSER)

    def _wire_elimination(self, matches: List[Match]):
        brackets = {}
        for match in matches:
            brackets.setdefault(match.bracket, []).append(match)

        for bracket in (None, BRACKET_WINNERS):
            index = {(m.round, m.match_number): m for m in brackets.get(bracket, [])}
            for (round_number, match_number), match in index.items():
                next_round, next_number, slot = feeder_target(round_number, match_number)
                target = index.get((next_round, next_number))
                if target is not None:
                    self.add_edge(match, target, slot)

        winners = brackets.get(BRACKET_WINNERS, [])
        grand_finals = brackets.get(BRACKET_FINAL, [])
        if winners and grand_finals:
            last_round = max(m.round for m in winners)
            winners_final = [m for m in winners if m.round == last_round]
            if len(winners_final) == 1:
                self.add_edge(winners_final[0], grand_finals[0], 'player1')

    def downstream(self, match: Match) -> List[Edge]:
        """Edges leaving `match`. Raises BracketStructureError when a knockout match feeds nothing."""
        edges = self.edges.get(match.id, [])
        if not edges and match.stage == STAGE_PLAYOFF and match.playoff_round in (QUARTER_FINAL, SEMI_FINAL):
            raise BracketStructureError(
                f"No downstream match for {match.id} ({match.playoff_round}, cup={match.cup})")
        return edges


def propagate(fixtures: List[Match], match: Match, graph: Optional[BracketGraph] = None,
              formats: Optional[Dict[str, str]] = None) -> List[Match]:
    """
    Push the result of a completed `match` into the matches that depend on it.

    Only empty slots are written. A missing downstream match is logged and
    skipped; nothing here raises on a malformed bracket. Returns the matches
    that changed.
    """
    if not match.completed or not match.winner:
        return []
    if is_placeholder(match.winner):
        logger.warning("Match %s has placeholder %s as winner, not advancing", match.id, match.winner)
        return []

    graph = graph or BracketGraph.build(fixtures, formats)
    try:
        edges = graph.downstream(match)
    except BracketStructureError as e:
        logger.warning("%s; advancement skipped", e)
        return []

    updated = []
    for edge in edges:
        player = match.winner if edge.carries == CARRY_WINNER else match.loser()
        if player is None:
            continue
        current = getattr(edge.target, edge.slot)
        if current is not None:
            if current != player:
                logger.debug("Slot %s of %s already holds %s, leaving it", edge.slot, edge.target.id, current)
            continue
        setattr(edge.target, edge.slot, player)
        logger.debug("Advanced %s (%s of %s) into %s.%s", player, edge.carries, match.id,
                     edge.target.id, edge.slot)
        if edge.target not in updated:
            updated.append(edge.target)
    return updated


def propagate_all(fixtures: List[Match], formats: Optional[Dict[str, str]] = None) -> List[Match]:
    """Re-apply propagation for every completed match, in round order."""
    graph = BracketGraph.build(fixtures, formats)
    updated = []
    for match in sorted(fixtures, key=lambda m: (m.round or 0, m.match_number or 0)):
        for target in propagate(fixtures, match, graph=graph):
            if target not in updated:
                updated.append(target)
    return updated


def find_match(fixtures: List[Match], match_id: str) -> Match:
    for match in fixtures:
        if match.id == match_id:
            return match
    raise InvalidInputError(f"Match not found: {match_id}")


def _withdraw_result(match: Match, graph: BracketGraph) -> List[Match]:
    """
    Clear the downstream slots still holding the current result of `match`.

    Raises InvalidInputError when one of those matches is already completed.
    """
    try:
        edges = graph.downstream(match)
    except BracketStructureError:
        return []

    previous = {CARRY_WINNER: match.winner, CARRY_LOSER: match.loser()}
    held = [edge for edge in edges
            if previous[edge.carries] is not None and getattr(edge.target, edge.slot) == previous[edge.carries]]
    for edge in held:
        if edge.target.completed:
            raise InvalidInputError(
                f"Cannot change the result of {match.id}: {edge.target.id} has already been played")

    cleared = []
    for edge in held:
        setattr(edge.target, edge.slot, None)
        logger.info("Withdrew %s from %s.%s after a score change on %s",
                    previous[edge.carries], edge.target.id, edge.slot, match.id)
        if edge.target not in cleared:
            cleared.append(edge.target)
    return cleared


def record_score(fixtures: List[Match], match_id: str, score: str,
                 formats: Optional[Dict[str, str]] = None) -> List[Match]:
    """
    Enter an "A-B" score for a match, mark it complete and advance the winner.

    The side with the higher score wins. Re-scoring a completed match with
    a different winner moves the new result into the downstream slots,
    unless a downstream match holding the old result was already played.
    Returns the scored match followed by every match that changed.
    """
    match = find_match(fixtures, match_id)
    if match.player1 is None or match.player2 is None:
        raise InvalidInputError(f"Match {match_id} does not have both players yet")

    parts = str(score).split('-')
    if len(parts) != 2 or not all(part.strip().isdigit() for part in parts):
        raise InvalidInputError(f"Score must look like 21-15, got {score!r}")
    score1, score2 = parse_score(score)
    if score1 == score2:
        raise InvalidInputError(f"Score {score} has no winner")

    winner = match.player1 if score1 > score2 else match.player2
    if is_placeholder(winner):
        raise InvalidInputError(f"Placeholder entrant {winner} cannot be awarded a win")

    graph = BracketGraph.build(fixtures, formats)
    changed = []
    if match.completed and match.winner is not None and match.winner != winner:
        changed = _withdraw_result(match, graph)

    match.score = f"{score1}-{score2}"
    match.winner = winner
    match.completed = True
    for target in propagate(fixtures, match, graph=graph):
        if target not in changed:
            changed.append(target)
    return [match] + changed


def reset_scores(fixtures: List[Match], category: Optional[str] = None) -> int:
    """Clear score, winner and completed on every scored match. Returns how many were reset."""
    reset = 0
    for match in fixtures:
        if category is not None and match.category != category:
            continue
        if match.score or match.completed:
            match.score = None
            match.winner = None
            match.completed = False
            reset += 1
    return reset
