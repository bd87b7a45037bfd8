"""
Voice Command Demo: utterance -> action space -> ranker -> state machine

Drives the robot in the two-room demo scene with typed commands (the text a
speech recognizer would produce):
1. The action space is rebuilt from the current room and interaction
2. The sentence embedder ranks every candidate against the command
3. The controller resolves the best match and the runtime ticks until the
   robot settles

Usage:
    python demo_voice.py                     # Run test sequence
    python demo_voice.py --interactive       # Interactive mode
    python demo_voice.py --threshold 0.3     # Stricter matching

NOTE: Requires sentence-transformers (downloads all-MiniLM-L6-v2 on first run).
"""
import argparse
from typing import Dict, List

from jammo.controller import ControllerConfig
from jammo.intent import EmbedderConfig, EmbeddingModelError, SentenceEmbedder
from jammo.runtime import Runtime, RuntimeConfig
from jammo.utils import setup_logging


class VoiceDemo:
    """Feeds commands to the runtime and prints what the robot does."""

    def __init__(self, threshold: float, max_ticks: int, model_name: str, device: str):
        self.embedder = SentenceEmbedder(EmbedderConfig(model_name=model_name, device=device, use_cache=True))
        print(f"Loading embedding model {model_name}...")
        self.embedder.load()

        self.runtime = Runtime(
            encoder=self.embedder,
            config=RuntimeConfig(),
            controller_config=ControllerConfig(acceptance_threshold=threshold),
        )
        self.max_ticks = max_ticks
        self.command_history: List[Dict] = []

    def print_world_state(self):
        controller = self.runtime.controller
        state = controller.get_state()
        pos = state["position"]
        print(f"Room: {state['current_room']}   Robot: ({pos['x']:.2f}, {pos['z']:.2f})   "
              f"State: {state['agent']['state']}")
        print(f"Inventory: {state['agent']['inventory'] or '-'}")
        interaction = controller.current_interaction
        if interaction is not None:
            print(f"Interacting with: {interaction.name}")

    def print_action_space(self):
        space = self.runtime.controller.build_action_space()
        print(f"\nAction space ({len(space)} commands):")
        for i, action in enumerate(space):
            noun = f" [{action.noun}]" if action.noun else ""
            print(f"  {i:3d}. {action.sentence:<32} {action.verb}{noun}")

    def process_input(self, user_input: str):
        print(f"\nYou: {user_input}")
        self.runtime.push_utterance(user_input)
        first = self.runtime.step()
        resolved = first.resolved[0]

        matched = resolved.action.sentence if resolved.action else "-"
        verdict = "accepted" if resolved.accepted else "rejected"
        print(f"  Matched: \"{matched}\" (score {resolved.score:.3f}, {verdict})")
        print(f"  State:   {resolved.state.name.lower()}")

        result = self.runtime.run_until_idle(self.max_ticks)
        print(f"  Settled: {result.state.name.lower()} after {result.tick - first.tick + 1} ticks")
        cues = [c.value for c in getattr(self.runtime.presenter, "cues", [])]
        if cues:
            print(f"  Cues so far: {', '.join(cues)}")

        self.command_history.append({"input": user_input, "result": resolved.to_dict()})

    def run_test_sequence(self, inputs: List[str]):
        print("\n" + "#" * 70)
        print("# VOICE COMMAND DEMO - Test Sequence")
        print("#" * 70)
        self.print_world_state()

        for i, user_input in enumerate(inputs):
            print(f"\n{'-' * 70}\nTEST {i + 1}/{len(inputs)}")
            self.process_input(user_input)
            self.print_world_state()

        self.print_summary()

    def run_interactive(self):
        print("\n" + "#" * 70)
        print("# VOICE COMMAND DEMO - Interactive Mode")
        print("#" * 70)
        self.print_world_state()
        print("\nType commands for the robot. 'quit' exits, 'show' lists the action space,")
        print("'gameover' ends the round (then say 'restart').")

        while True:
            try:
                user_input = input("\nYou: ").strip()
                if not user_input:
                    continue
                if user_input.lower() == "quit":
                    break
                if user_input.lower() == "show":
                    self.print_world_state()
                    self.print_action_space()
                    continue
                if user_input.lower() == "gameover":
                    self.runtime.game_over("demo")
                    self.runtime.step()
                    print("  Game over. Only 'restart' is understood now.")
                    continue

                self.process_input(user_input)
                self.print_world_state()

            except KeyboardInterrupt:
                print("\n\nInterrupted by user")
                break
            except EOFError:
                break

        self.print_summary()

    def print_summary(self):
        print("\n" + "=" * 70)
        print("SESSION SUMMARY")
        print("=" * 70)
        print(f"Total commands: {len(self.command_history)}")
        print(f"Total ticks: {self.runtime.tick}")
        for i, cmd in enumerate(self.command_history):
            result = cmd["result"]
            print(f"  {i + 1}. \"{cmd['input']}\" -> {result['state']} ({result['score']:.3f})")


def main():
    parser = argparse.ArgumentParser(description="Voice Command Demo")
    parser.add_argument("--interactive", action="store_true",
                        help="Run in interactive mode")
    parser.add_argument("--threshold", type=float, default=0.15,
                        help="Acceptance threshold for the best match (default: 0.15)")
    parser.add_argument("--max-ticks", type=int, default=1000,
                        help="Ticks to wait for the robot to settle (default: 1000)")
    parser.add_argument("--model", type=str, default="sentence-transformers/all-MiniLM-L6-v2",
                        help="Sentence embedding model")
    parser.add_argument("--device", type=str, default="cpu",
                        help="Torch device (default: cpu)")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        help="Logging level (default: WARNING)")

    args = parser.parse_args()
    setup_logging(args.log_level)

    test_inputs = [
        "hello there",
        "could you go over to the blue button",
        "press it",
        "okay that's enough, go back",
        "grab the key",
        "go hide somewhere",
        "come here please",
        "walk through the door",
        "xyzzy plugh",
    ]

    try:
        demo = VoiceDemo(args.threshold, args.max_ticks, args.model, args.device)
    except EmbeddingModelError as e:
        print(f"\nERROR: {e}")
        return

    if args.interactive:
        demo.run_interactive()
    else:
        demo.run_test_sequence(test_inputs)


if __name__ == "__main__":
    main()
