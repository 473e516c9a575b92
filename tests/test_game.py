"""Tests for the game tree and subgame handling."""

import pytest
import numpy as np

from efnash.game.tree import CHANCE, ExtensiveGame, NodeType
from efnash.game.subgames import (
    child_subgames,
    extract_subgame,
    is_legal_subgame,
    mark_subgame,
    mark_subgames,
    marked_subgame_roots,
    unmark_subgames,
)


class TestExtensiveGame:
    def test_new_game_is_single_terminal(self):
        game = ExtensiveGame(["A", "B"])

        assert game.num_players == 2
        assert game.root.is_terminal
        assert game.root.marked
        assert game.count_nodes() == {
            "total": 1, "player": 0, "chance": 0, "terminal": 1,
        }

    def test_needs_players(self):
        with pytest.raises(ValueError):
            ExtensiveGame([])

    def test_append_move(self, entry_game):
        counts = entry_game.count_nodes()

        assert counts["total"] == 5
        assert counts["player"] == 2
        assert counts["terminal"] == 3
        assert entry_game.root.node_type == NodeType.PLAYER
        assert entry_game.root.player.number == 0

    def test_append_move_requires_terminal(self, entry_game):
        iset = entry_game.new_infoset(0, ["x", "y"])
        with pytest.raises(ValueError):
            entry_game.append_move(entry_game.root, iset)

    def test_dimensionality(self, matching_pennies):
        assert matching_pennies.dimensionality() == [[2], [2]]
        assert len(matching_pennies.infosets) == 2

    def test_infoset_members(self, matching_pennies):
        second = matching_pennies.players[1].infosets[0]

        assert len(second.members) == 2
        assert all(m.infoset is second for m in second.members)

    def test_set_payoffs_wrong_length(self, entry_game):
        terminal = entry_game.terminal_nodes()[0]
        with pytest.raises(ValueError, match="Expected 2 payoffs"):
            entry_game.set_payoffs(terminal, [1.0])

    def test_set_payoffs_on_move(self, entry_game):
        with pytest.raises(ValueError):
            entry_game.set_payoffs(entry_game.root, [1.0, 1.0])

    def test_chance_infoset(self, two_subgame_game):
        coin = two_subgame_game.chance.infosets[0]

        assert coin.is_chance
        assert coin.player.number == CHANCE
        assert np.allclose(coin.probs, [0.5, 0.5])
        assert two_subgame_game.root.is_chance

    def test_chance_probs_validated(self):
        game = ExtensiveGame(["A"])
        with pytest.raises(ValueError):
            game.new_chance_infoset(["x", "y"], [0.5])
        with pytest.raises(ValueError, match="distribution"):
            game.new_chance_infoset(["x", "y"], [0.7, 0.7])

    def test_chance_player_needs_chance_infoset(self):
        game = ExtensiveGame(["A"])
        with pytest.raises(ValueError):
            game.new_infoset(CHANCE, ["x"])

    def test_unknown_player(self):
        game = ExtensiveGame(["A"])
        with pytest.raises(ValueError, match="Unknown player"):
            game.new_infoset(3, ["x"])

    def test_prior_action(self, entry_game):
        inside = entry_game.root.children[1]

        assert entry_game.root.prior_action is None
        assert inside.prior_action.label == "In"
        assert entry_game.root.child(inside.prior_action) is inside

    def test_child_rejects_foreign_action(self, entry_game):
        respond = entry_game.players[1].infosets[0]
        with pytest.raises(ValueError):
            entry_game.root.child(respond.actions[0])


class TestSubgames:
    def test_legal_subgames(self, entry_game):
        inside = entry_game.root.children[1]

        assert is_legal_subgame(entry_game.root)
        assert is_legal_subgame(inside)
        assert not is_legal_subgame(entry_game.root.children[0])  # terminal

    def test_imperfect_information_blocks_subgames(self, matching_pennies):
        after_h, after_t = matching_pennies.root.children

        assert not is_legal_subgame(after_h)
        assert not is_legal_subgame(after_t)
        assert mark_subgames(matching_pennies) == 1

    def test_mark_subgames(self, two_subgame_game):
        left, right = two_subgame_game.root.children

        assert mark_subgames(two_subgame_game) == 3
        assert left.marked and right.marked
        assert left.children[0].subgame_root is left
        assert right.children[1].subgame_root is right
        assert two_subgame_game.root.subgame_root is two_subgame_game.root

    def test_marked_roots_post_order(self, two_subgame_game):
        mark_subgames(two_subgame_game)
        left, right = two_subgame_game.root.children

        roots = marked_subgame_roots(two_subgame_game)

        assert roots == [left, right, two_subgame_game.root]

    def test_unmark_subgames(self, two_subgame_game):
        mark_subgames(two_subgame_game)
        unmark_subgames(two_subgame_game)

        assert marked_subgame_roots(two_subgame_game) == [two_subgame_game.root]
        assert all(
            n.subgame_root is two_subgame_game.root
            for n in two_subgame_game.nodes()
        )

    def test_mark_single_subgame(self, entry_game):
        inside = entry_game.root.children[1]
        mark_subgame(entry_game, inside)

        assert marked_subgame_roots(entry_game) == [inside, entry_game.root]
        assert child_subgames(entry_game.root) == [inside]

    def test_mark_illegal_subgame(self, matching_pennies):
        with pytest.raises(ValueError):
            mark_subgame(matching_pennies, matching_pennies.root.children[0])

    def test_extract_without_nested(self, entry_game):
        sub, infoset_map = extract_subgame(entry_game, entry_game.root)

        assert sub.count_nodes() == entry_game.count_nodes()
        assert sub.dimensionality() == [[2], [2]]
        assert set(infoset_map.values()) == set(entry_game.infosets)

    def test_extract_replaces_nested_subgames(self, entry_game):
        mark_subgames(entry_game)
        inside = entry_game.root.children[1]

        sub, infoset_map = extract_subgame(
            entry_game, entry_game.root, {inside: np.array([2.0, 2.0])}
        )

        assert sub.dimensionality() == [[2], []]
        assert sub.count_nodes()["terminal"] == 2
        assert np.allclose(sub.root.children[1].payoffs, [2.0, 2.0])
        assert list(infoset_map.values()) == [entry_game.players[0].infosets[0]]

    def test_extract_nested_subgame(self, entry_game):
        mark_subgames(entry_game)
        inside = entry_game.root.children[1]

        sub, infoset_map = extract_subgame(entry_game, inside)

        assert sub.dimensionality() == [[], [2]]
        assert [a.label for a in sub.players[1].infosets[0].actions] == [
            "Fight", "Accommodate",
        ]
        assert np.allclose(sub.root.children[1].payoffs, [2.0, 2.0])

    def test_extract_missing_value(self, entry_game):
        mark_subgames(entry_game)
        with pytest.raises(ValueError, match="Missing value"):
            extract_subgame(entry_game, entry_game.root)

    def test_extract_preserves_infoset_order(self):
        # Alice moves at the root and again inside a nested subgame, with
        # the nested infoset created first.
        game = ExtensiveGame(["Alice", "Bob"])
        late = game.new_infoset(0, ["c", "d"], label="late")
        early = game.new_infoset(0, ["a", "b"], label="early")
        bob = game.new_infoset(1, ["x", "y"], label="bob")

        a, b = game.append_move(game.root, early)
        x, y = game.append_move(a, bob)
        c, d = game.append_move(x, late)
        for node, pay in ((b, 0.0), (y, 1.0), (c, 2.0), (d, 3.0)):
            game.set_payoffs(node, [pay, pay])

        mark_subgames(game)
        assert marked_subgame_roots(game) == [x, a, game.root]

        sub, infoset_map = extract_subgame(game, x)
        assert [i.label for i in sub.players[0].infosets] == ["late"]
        assert infoset_map[sub.players[0].infosets[0]] is late

    def test_deep_tree(self, deep_chain_game):
        game = deep_chain_game
        depth = len(game.infosets)

        assert mark_subgames(game) == depth
        roots = marked_subgame_roots(game)
        assert len(roots) == depth
        assert roots[-1] is game.root
        assert roots[0].infoset is game.infosets[-1]
        assert child_subgames(game.root) == [game.root.children[1]]

        unmark_subgames(game)
        deepest = game.terminal_nodes()[-1]
        assert deepest.subgame_root is game.root

        sub, infoset_map = extract_subgame(game, game.root)
        assert sub.count_nodes() == game.count_nodes()
        assert [infoset_map[i] for i in sub.infosets] == game.infosets
