"""
MapSketch CLI
=============

Command-line replay of scripted drawing sessions.

    mapsketch replay SCRIPT.yaml [--snapshot OUT.png] [--publish]
    mapsketch circle LNG LAT RADIUS
    mapsketch distance LNG1 LAT1 LNG2 LAT2
"""

from .registry import StepRegistry, StepNotAvailableError
from .replay import ReplayResult, SessionReplayer, load_yaml_config, parse_step

__all__ = [
    'StepRegistry',
    'StepNotAvailableError',
    'ReplayResult',
    'SessionReplayer',
    'load_yaml_config',
    'parse_step',
]
