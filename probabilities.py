from functools import lru_cache
from math import prod

from hypergeometric import choose, draw_two_type_min, draw_three_type_min
from models import HAND_SIZE, TurnProbability


def multi_type_prob(deck_size, type_counts, drawn, type_drawn):
    """Probability of drawing exactly ``type_drawn[i]`` of every tracked type in ``drawn`` cards.

    Whatever is left of the draw comes from the untracked "other" cards. Structurally
    impossible draws (more tracked cards than drawn, more others than exist) are 0.
    """
    total_drawn = sum(type_drawn)
    if total_drawn > drawn:
        return 0.0

    others_total = deck_size - sum(type_counts)
    others_drawn = drawn - total_drawn
    if others_drawn < 0 or others_drawn > others_total:
        return 0.0

    denominator = choose(deck_size, drawn)
    if denominator == 0:
        return 0.0
    numerator = choose(others_total, others_drawn) * prod(choose(n, k) for n, k in zip(type_counts, type_drawn))
    return numerator / denominator


def multi_type_prob_cumulative(deck_size, type_counts, drawn, type_drawn_min):
    """Probability of drawing at least ``type_drawn_min[i]`` of every type."""
    match len(type_counts):
        case 2:
            return draw_two_type_min(deck_size, *type_counts, drawn, *type_drawn_min)
        case 3:
            return draw_three_type_min(deck_size, *type_counts, drawn, *type_drawn_min)

    num_types = len(type_counts)
    current = [0] * num_types
    total = 0.0

    def enumerate_draws(index, remaining_slots):
        nonlocal total
        if index == num_types:
            total += multi_type_prob(deck_size, type_counts, drawn, current)
            return
        for count in range(type_drawn_min[index], min(type_counts[index], remaining_slots) + 1):
            current[index] = count
            enumerate_draws(index + 1, remaining_slots - count)
        current[index] = 0

    enumerate_draws(0, drawn)
    return total


def calc_multi_type_success(deck_size, types, hand_counts):
    """Probability that a 7-card hand with ``hand_counts`` meets every type's deadline.

    Unmet requirements are grouped by deadline turn and resolved in ascending
    order. Each interval draws one card per turn; every split of those cards
    across the types is weighted by ``multi_type_prob`` against what is still
    in the library, and only splits that satisfy the requirements due on that
    turn carry on to the next deadline.
    """
    hand_counts = tuple(hand_counts)
    unsatisfied = [i for i, t in enumerate(types) if hand_counts[i] < t.required]
    if not unsatisfied:
        return 1.0

    deadlines = sorted({types[i].by_turn for i in unsatisfied})
    if deadlines[0] <= 0:
        return 0.0

    due = {turn: [i for i in unsatisfied if types[i].by_turn == turn] for turn in deadlines}
    num_types = len(types)
    library_size = deck_size - HAND_SIZE
    # One draw buffer per deadline step; deeper steps must not clobber shallower ones.
    buffers = [[0] * num_types for _ in deadlines]

    @lru_cache(maxsize=None)
    def solve(step, counts):
        if step == len(deadlines):
            return 1.0

        target_turn = deadlines[step]
        previous_turn = deadlines[step - 1] if step else 0
        cards_to_draw = target_turn - previous_turn
        if cards_to_draw <= 0:
            return 0.0

        remaining = [t.count - c for t, c in zip(types, counts)]
        cards_in_library = library_size - previous_turn
        draw = buffers[step]
        total = 0.0

        def generate_draws(index, remaining_slots):
            nonlocal total
            if index == num_types:
                prob = multi_type_prob(cards_in_library, remaining, cards_to_draw, draw)
                if prob > 0:
                    next_counts = tuple(c + d for c, d in zip(counts, draw))
                    if all(next_counts[i] >= types[i].required for i in due[target_turn]):
                        total += prob * solve(step + 1, next_counts)
                return
            for count in range(min(remaining[index], remaining_slots) + 1):
                draw[index] = count
                generate_draws(index + 1, remaining_slots - count)
            draw[index] = 0

        generate_draws(0, cards_to_draw)
        return total

    return solve(0, hand_counts)


def at_least_probability(deck_size, type_count, cards_seen, required):
    prob = 0.0
    for drawn in range(required, min(type_count, cards_seen) + 1):
        prob += multi_type_prob(deck_size, [type_count], cards_seen, [drawn])
    return prob


def calculate_turn_probabilities(context, extra_turns=3):
    if not context.types:
        return []
    max_turn = max(t.by_turn for t in context.types) + extra_turns
    turn_data = []
    for turn in range(max_turn + 1):
        cards_seen = HAND_SIZE + turn
        type_probabilities = tuple(
            at_least_probability(context.deck_size, t.count, cards_seen, t.required)
            for t in context.types
        )
        combined = multi_type_prob_cumulative(
            context.deck_size,
            context.type_counts,
            cards_seen,
            [t.required for t in context.types],
        )
        turn_data.append(TurnProbability(turn, type_probabilities, combined))
    return turn_data
