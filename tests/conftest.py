"""Pytest configuration and fixtures."""

import pytest

from efnash.game.tree import ExtensiveGame


@pytest.fixture
def one_player_game():
    """Single player choosing between payoffs 3 and 1."""
    game = ExtensiveGame(["Alice"], title="Dominant action")
    iset = game.new_infoset(0, ["U", "D"], label="A")
    up, down = game.append_move(game.root, iset)
    game.set_payoffs(up, [3.0])
    game.set_payoffs(down, [1.0])
    return game


@pytest.fixture
def entry_game():
    """
    Entry deterrence.

    Entrant stays Out (1, 3) or goes In; the incumbent then Fights (0, 0)
    or Accommodates (2, 2).
    """
    game = ExtensiveGame(["Entrant", "Incumbent"], title="Entry")
    entry = game.new_infoset(0, ["Out", "In"], label="enter")
    out, inside = game.append_move(game.root, entry)
    game.set_payoffs(out, [1.0, 3.0])

    respond = game.new_infoset(1, ["Fight", "Accommodate"], label="respond")
    fight, accommodate = game.append_move(inside, respond)
    game.set_payoffs(fight, [0.0, 0.0])
    game.set_payoffs(accommodate, [2.0, 2.0])
    return game


@pytest.fixture
def matching_pennies():
    """Matching pennies; the second mover does not see the first move."""
    game = ExtensiveGame(["Matcher", "Mismatcher"], title="Matching pennies")
    first = game.new_infoset(0, ["H", "T"], label="first")
    after_h, after_t = game.append_move(game.root, first)

    second = game.new_infoset(1, ["h", "t"], label="second")
    hh, ht = game.append_move(after_h, second)
    th, tt = game.append_move(after_t, second)

    game.set_payoffs(hh, [1.0, -1.0])
    game.set_payoffs(ht, [-1.0, 1.0])
    game.set_payoffs(th, [-1.0, 1.0])
    game.set_payoffs(tt, [1.0, -1.0])
    return game


@pytest.fixture
def two_subgame_game():
    """
    Chance picks one of two independent one-player decisions.

    Left: Alice picks U (3) over D (1). Right: Bob picks R (2) over L (1).
    """
    game = ExtensiveGame(["Alice", "Bob"], title="Two subgames")
    coin = game.new_chance_infoset(["left", "right"], [0.5, 0.5])
    left, right = game.append_move(game.root, coin)

    alice = game.new_infoset(0, ["U", "D"], label="A")
    up, down = game.append_move(left, alice)
    game.set_payoffs(up, [3.0, 0.0])
    game.set_payoffs(down, [1.0, 0.0])

    bob = game.new_infoset(1, ["L", "R"], label="B")
    bob_left, bob_right = game.append_move(right, bob)
    game.set_payoffs(bob_left, [0.0, 1.0])
    game.set_payoffs(bob_right, [0.0, 2.0])
    return game


DEEP_CHAIN_LENGTH = 1200


@pytest.fixture
def deep_chain_game():
    """
    A single player deciding Stop (0) or Go, many times in a row.

    Going all the way down pays 1. The tree is deeper than the default
    recursion limit.
    """
    game = ExtensiveGame(["Alice"], title="Deep chain")
    node = game.root
    for i in range(DEEP_CHAIN_LENGTH):
        iset = game.new_infoset(0, ["Stop", "Go"], label=f"move {i}")
        stop, node = game.append_move(node, iset)
        game.set_payoffs(stop, [0.0])
    game.set_payoffs(node, [1.0])
    return game
