"""
jammo - voice-commanded robot for interactive scenes.

Subpackages:
    actions     action catalog and action space builder
    intent      sentence embedder and similarity ranker
    world       world objects, registry, mover and presenter interfaces
    controller  the robot's state machine
    runtime     tick loop tying the pieces together
"""

__version__ = "0.1.0"
