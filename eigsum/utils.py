# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Sequence

from .backend import ArrayLike

def check_pos(msg: str, value: int | float):
    if value <= 0:
        raise ValueError(f"{msg} must be above zero, got {value}")

def check_non_neg(msg: str, value: int | float):
    if value < 0:
        raise ValueError(f"{msg} must be a positive, got {value}")

def check_guesses(guesses: Sequence[ArrayLike]) -> None:
    if len(guesses) == 0:
        raise ValueError("No initial vectors provided.")
    ref = guesses[0]
    if any(guess.shape != ref.shape for guess in guesses[1:]):
        raise ValueError("All initial vectors must have the same dimensions.")
    if any(guess.device != ref.device for guess in guesses[1:]):
        raise ValueError("All initial vectors must be on the same device.")
