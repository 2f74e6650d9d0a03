from math import comb


def choose(n, k):
    if n < 0 or k < 0 or k > n:
        return 0
    return comb(n, k)


def draw_type(deck_size, type_count, drawn, k):
    """P(exactly k of a type with type_count copies in drawn cards)."""
    total = choose(deck_size, drawn)
    if total == 0:
        return 0.0
    return choose(type_count, k) * choose(deck_size - type_count, drawn - k) / total


def draw_type_min(deck_size, type_count, drawn, minimum):
    total = choose(deck_size, drawn)
    if total == 0:
        return 0.0
    ways = 0
    for k in range(max(minimum, 0), min(type_count, drawn) + 1):
        ways += choose(type_count, k) * choose(deck_size - type_count, drawn - k)
    return ways / total


def draw_two_type_min(deck_size, count_a, count_b, drawn, min_a, min_b):
    total = choose(deck_size, drawn)
    if total == 0:
        return 0.0
    others = deck_size - count_a - count_b
    ways = 0
    for a in range(max(min_a, 0), min(count_a, drawn) + 1):
        ways_a = choose(count_a, a)
        for b in range(max(min_b, 0), min(count_b, drawn - a) + 1):
            ways += ways_a * choose(count_b, b) * choose(others, drawn - a - b)
    return ways / total


def draw_three_type_min(deck_size, count_a, count_b, count_c, drawn, min_a, min_b, min_c):
    total = choose(deck_size, drawn)
    if total == 0:
        return 0.0
    others = deck_size - count_a - count_b - count_c
    ways = 0
    for a in range(max(min_a, 0), min(count_a, drawn) + 1):
        ways_a = choose(count_a, a)
        for b in range(max(min_b, 0), min(count_b, drawn - a) + 1):
            ways_ab = ways_a * choose(count_b, b)
            for c in range(max(min_c, 0), min(count_c, drawn - a - b) + 1):
                ways += ways_ab * choose(count_c, c) * choose(others, drawn - a - b - c)
    return ways / total
