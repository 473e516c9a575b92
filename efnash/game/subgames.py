"""
Subgame identification and extraction.

A subgame is rooted at a node whose subtree is closed under information
sets: every infoset reached below the node has all of its members below
the node as well. Marked subgame roots partition the tree; each node
records the nearest marked root above it (itself included) in
GameNode.subgame_root.
"""

from typing import Optional

import numpy as np

from .tree import CHANCE, ExtensiveGame, GameNode, Infoset


def is_legal_subgame(node: GameNode) -> bool:
    """Check whether a node can root a subgame."""
    if node.is_terminal:
        return False

    subtree = set(node.descendants())
    for member in subtree:
        if member.infoset is None:
            continue
        if any(other not in subtree for other in member.infoset.members):
            return False
    return True


def _refresh_subgame_roots(game: ExtensiveGame) -> None:
    game.root.marked = True

    stack = [(game.root, game.root)]
    while stack:
        node, current = stack.pop()
        if node.marked:
            current = node
        node.subgame_root = current
        stack.extend((child, current) for child in node.children)


def mark_subgames(game: ExtensiveGame) -> int:
    """
    Mark every legal subgame root in the tree.

    Returns:
        Number of marked roots (including the game root)
    """
    count = 0
    for node in game.nodes():
        node.marked = node is game.root or is_legal_subgame(node)
        count += node.marked

    _refresh_subgame_roots(game)
    return count


def unmark_subgames(game: ExtensiveGame) -> None:
    """Remove all subgame marks except the one on the root."""
    for node in game.nodes():
        node.marked = False
    _refresh_subgame_roots(game)


def mark_subgame(game: ExtensiveGame, node: GameNode) -> None:
    """Mark a single node as a subgame root."""
    if node is not game.root and not is_legal_subgame(node):
        raise ValueError("Node does not root a subgame")
    node.marked = True
    _refresh_subgame_roots(game)


def marked_subgame_roots(game: ExtensiveGame) -> list[GameNode]:
    """
    List the marked subgame roots.

    Roots come in post-order, so every subgame appears after all the
    subgames nested inside it and the game root comes last.
    """
    # Parents before children, rightmost child first; reversed at the end
    order = []
    stack = [game.root]
    while stack:
        node = stack.pop()
        order.append(node)
        stack.extend(node.children)
    return [node for node in reversed(order) if node.marked]


def child_subgames(node: GameNode) -> list[GameNode]:
    """Nearest marked subgame roots strictly below a node."""
    found = []
    stack = list(reversed(node.children))
    while stack:
        n = stack.pop()
        if n.marked:
            found.append(n)
        else:
            stack.extend(reversed(n.children))
    return found


def extract_subgame(
    game: ExtensiveGame,
    root: GameNode,
    values: Optional[dict[GameNode, np.ndarray]] = None,
) -> tuple[ExtensiveGame, dict[Infoset, Infoset]]:
    """
    Copy the subgame rooted at a marked node into a new game.

    Nested marked subgames are cut off and replaced by terminal nodes
    paying values[nested_root]. Within each player, the infosets of the
    new game appear in the same relative order as in the original game.

    Args:
        game: Game containing the subgame
        root: Marked subgame root
        values: Payoff vectors for the nested marked roots

    Returns:
        Tuple of (reduced game, map from new infosets to original infosets)
    """
    if not root.marked:
        raise ValueError("Subgame root must be marked")
    values = values or {}

    sub = ExtensiveGame([p.label for p in game.players], title=game.title)
    to_new: dict[Infoset, Infoset] = {}

    def in_subgame(iset: Infoset) -> bool:
        return bool(iset.members) and iset.members[0].subgame_root is root

    for player in game.players:
        for iset in player.infosets:
            if in_subgame(iset):
                to_new[iset] = sub.new_infoset(
                    player.number, [a.label for a in iset.actions], iset.label
                )
    for iset in game.chance.infosets:
        if in_subgame(iset):
            to_new[iset] = sub.new_chance_infoset(
                [a.label for a in iset.actions], iset.probs.tolist(), iset.label
            )

    # Preorder, so infoset members are appended in the original order
    stack = [(root, sub.root)]
    while stack:
        src, dst = stack.pop()
        dst.label = src.label
        if src is not root and src.marked:
            if src not in values:
                raise ValueError("Missing value for nested subgame")
            sub.set_payoffs(dst, list(values[src]))
            continue
        if src.is_terminal:
            if src.payoffs is not None:
                sub.set_payoffs(dst, list(src.payoffs))
            continue
        children = sub.append_move(dst, to_new[src.infoset])
        stack.extend(reversed(list(zip(src.children, children))))

    infoset_map = {
        new: old for old, new in to_new.items() if old.player.number != CHANCE
    }
    return sub, infoset_map
