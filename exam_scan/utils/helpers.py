from typing import Optional, Sequence, Tuple

class OMRUtils:
    """
    Static class with the small pure rules shared by the scanner and the
    balancer (no I/O).
    """

    @staticmethod
    def index_to_letter(index: int) -> str:
        """0 -> 'A', 1 -> 'B', ..."""
        if index < 0 or index > 25:
            raise ValueError(f"Option index out of range: {index}")
        return chr(65 + index)

    @staticmethod
    def letter_to_index(letter: str) -> int:
        """'A' -> 0, 'B' -> 1, ..."""
        if len(letter) != 1 or not 'A' <= letter <= 'Z':
            raise ValueError(f"Invalid option letter: {letter!r}")
        return ord(letter) - 65

    @staticmethod
    def option_letters(num_options: int) -> Tuple[str, ...]:
        """Letters used for ``num_options`` alternatives, e.g. 4 -> ('A', 'B', 'C', 'D')."""
        if num_options < 1 or num_options > 26:
            raise ValueError(f"num_options must be between 1 and 26, got {num_options}")
        return tuple(chr(65 + i) for i in range(num_options))

    @staticmethod
    def select_mark(densities: Sequence[float], min_fill: float, min_margin: float) -> Optional[int]:
        """
        Decide which bubble of a question is marked.

        Logic:
        1. No bubble reaches ``min_fill`` -> None (unanswered).
        2. The darkest bubble must beat the runner-up by ``min_margin``,
           otherwise the mark is ambiguous -> None.
        3. Otherwise -> index of the darkest bubble.

        Args:
            densities: Fill ratio (0..1) of each candidate bubble.
            min_fill: Minimum fill ratio of the selected bubble.
            min_margin: Minimum gap between best and second best.

        Returns:
            Index of the selected bubble, or None.
        """
        if not densities:
            return None

        ranked = sorted(range(len(densities)), key=lambda i: densities[i], reverse=True)
        best = ranked[0]
        best_density = densities[best]

        if best_density < min_fill:
            return None

        if len(ranked) > 1:
            runner_up = densities[ranked[1]]
            if best_density - runner_up < min_margin:
                return None

        return best
