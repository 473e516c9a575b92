"""Terminal display of behavior profiles and solutions."""

from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from efnash.solver.profile import BehaviorProfile
    from efnash.solver.solution import BehaviorSolution


def _prob_style(prob: float) -> Style:
    """Color a probability cell by how much weight it carries."""
    if prob < -1e-9 or prob > 1.0 + 1e-9:
        return Style(color="red", bold=True)
    if prob > 0.8:
        return Style(color="green")
    if prob > 0.2:
        return Style(color="yellow")
    if prob > 1e-9:
        return Style(color="orange3")
    return Style(color="grey50")


class ProfileDisplay:
    """
    Display a behavior profile as a table.

    One row per information set, with the conditional payoff of every
    active action next to its probability.
    """

    def __init__(self, profile: "BehaviorProfile", console: Optional[Console] = None):
        self.profile = profile
        self.console = console or Console()

    def render_table(self, title: str = "Profile", show_payoffs: bool = True) -> Table:
        """Build the rich table for the profile."""
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Player", style="bold")
        table.add_column("Infoset")
        table.add_column("Action")
        table.add_column("Prob", justify="right")
        if show_payoffs:
            table.add_column("Cond. payoff", justify="right")

        profile = self.profile
        cpay = profile.conditional_payoffs() if show_payoffs else None

        idx = 0
        for player in profile.game.players:
            for iset in player.infosets:
                iset_label = iset.label or str(iset.index + 1)
                for action in profile.support.infoset_actions(iset):
                    prob = float(profile.vector[idx])
                    row = [
                        player.label or str(player.number + 1),
                        iset_label,
                        str(action),
                        Text(f"{prob:.4f}", style=_prob_style(prob)),
                    ]
                    if cpay is not None:
                        row.append(f"{cpay[idx]:.4f}")
                    table.add_row(*row)
                    idx += 1

        return table

    def display_terminal(self, title: str = "Profile", show_payoffs: bool = True) -> None:
        """Print the profile in the terminal using rich."""
        self.console.print(self.render_table(title=title, show_payoffs=show_payoffs))


def display_solutions(
    solutions: list["BehaviorSolution"],
    console: Optional[Console] = None,
) -> None:
    """Print every solution with its Liapunov value."""
    console = console or Console()
    for i, solution in enumerate(solutions, 1):
        title = f"Solution {i} ({solution.method.name}, liap={solution.liap_value:.2e})"
        ProfileDisplay(solution.profile, console).display_terminal(title=title)
