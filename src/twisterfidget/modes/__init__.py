"""Controller modes and the default mode registry."""

import random
from concurrent.futures import Executor
from typing import Optional

from .ambient import FibonacciMode, PulseMode, RainbowMode, RandomMode, WaveMode
from .base import Mode, ModeContext
from .binary import BinaryMode
from .chase import ChaseMode
from .color_mixer import ColorMixerMode
from .linking import NormalLinkingMode
from .memory_game import Difficulty, GameState, MemoryGameMode
from .mirror import MirrorMode
from .photo import PhotoMode, PhotoUploader
from .ripple import RippleMode
from .select import SELECT_MAP, ModeSelectMode


def build_default_modes(
    rng: Optional[random.Random] = None,
    uploader: Optional[PhotoUploader] = None,
    executor: Optional[Executor] = None,
) -> list[Mode]:
    """
    Create one instance of every built-in mode.

    Args:
        rng: Shared random source for the games and the random mode
             (pass a seeded instance for reproducible runs)
        uploader: Photo uploader; the photo mode is only registered when given
        executor: Worker pool for photo uploads
    """
    modes: list[Mode] = [
        ModeSelectMode(),
        NormalLinkingMode(),
        MemoryGameMode(rng=rng),
        ChaseMode(),
        MirrorMode(),
        RainbowMode(),
        PulseMode(),
        RippleMode(),
        WaveMode(),
        BinaryMode(rng=rng),
        FibonacciMode(),
        RandomMode(rng=rng),
        ColorMixerMode(),
    ]
    if uploader is not None:
        modes.append(PhotoMode(uploader, executor))
    return modes


__all__ = [
    "SELECT_MAP",
    "BinaryMode",
    "ChaseMode",
    "ColorMixerMode",
    "Difficulty",
    "FibonacciMode",
    "GameState",
    "MemoryGameMode",
    "MirrorMode",
    "Mode",
    "ModeContext",
    "ModeSelectMode",
    "NormalLinkingMode",
    "PhotoMode",
    "PhotoUploader",
    "PulseMode",
    "RainbowMode",
    "RandomMode",
    "RippleMode",
    "WaveMode",
    "build_default_modes",
]
