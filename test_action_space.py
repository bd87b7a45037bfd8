"""Tests for the action catalog and the action space builder."""

from jammo.actions import (
    Action,
    ActionSpace,
    ActionSpaceBuilder,
    DEFAULT_BONUS_ACTIONS,
    disengage_actions,
    restart_space,
)
from jammo.controller import Agent


def test_action_target_and_noun():
    """Nouns are matched lowercase with dots stripped."""
    action = Action("Pick up the Key.001", "PickUp", "Key.001")
    assert action.has_target
    assert action.normalized_noun == "key001"
    assert not Action("dance", "Dance").has_target
    assert Action("back", "back").is_disengage()
    assert not Action("dance", "Dance").is_disengage()


def test_concat_keeps_fragment_order():
    a, b, c = Action("a", "X"), Action("b", "X"), Action("c", "X")
    space = ActionSpace.concat([a, b], [c])

    assert list(space) == [a, b, c]
    assert space.sentences() == ["a", "b", "c"]
    assert space.verbs() == ["X", "X", "X"]
    assert space[2] is c
    assert space[:2] == ActionSpace([a, b]), "Slices should stay ActionSpaces"
    assert (ActionSpace([a]) + [b]) == ActionSpace([a, b])


def test_contains_index_bounds():
    space = ActionSpace([Action("a", "X"), Action("b", "X")])
    assert space.contains_index(0)
    assert space.contains_index(1)
    assert not space.contains_index(2)
    assert not space.contains_index(-1)


def test_disengage_and_restart_spaces():
    assert [a.sentence for a in disengage_actions()] == ["stop", "exit", "back", "let us go"]
    assert all(a.verb == "back" for a in disengage_actions())

    space = restart_space()
    assert len(space) == 1
    assert space[0] == Action("restart", "restart", "restart")


def test_room_actions_for_interactables_pickups_and_switchers(registry):
    """Every object in the current room contributes its phrasings."""
    sentences = [a.sentence for a in registry.current_room_actions()]

    for phrasing in ("Move to the blue button", "Go to the button", "Use the button",
                     "Interact with the blue button", "Hide locker", "Hide closet",
                     "Pick up the key", "Go to the door", "Move to the hallway"):
        assert phrasing in sentences, f"missing {phrasing!r}"

    # The hallway is not the current room.
    assert "Use the terminal" not in sentences
    # Plain objects and markers offer nothing by themselves.
    assert not any("cube" in s for s in sentences)


def test_room_actions_order(registry):
    """Interactables first, then pickups, then room switchers."""
    verbs_by_noun = [(a.noun, a.verb) for a in registry.current_room_actions()]
    nouns = [noun for noun, _ in verbs_by_noun]
    assert nouns.index("blue button") < nouns.index("key") < nouns.index("door")


def test_build_starts_with_bonus_actions_when_free(registry):
    builder = ActionSpaceBuilder(registry)
    space = builder.build(Agent())

    bonus = len(DEFAULT_BONUS_ACTIONS)
    assert space[:bonus] == ActionSpace(DEFAULT_BONUS_ACTIONS)
    assert space[bonus:] == ActionSpace(registry.current_room_actions())
    assert builder.room_space() == space


def test_build_puts_interaction_fragment_first(registry):
    builder = ActionSpaceBuilder(registry)
    button = registry.find_interactable("blue button")
    agent = Agent(current_interaction=button.handle)

    space = builder.build(agent)
    fragment = button.get_current_actions()

    assert space[:len(fragment)] == ActionSpace(fragment)
    assert space[0].sentence == "press the button"
    assert space[len(fragment)] == DEFAULT_BONUS_ACTIONS[0]


def test_build_is_deterministic(registry):
    builder = ActionSpaceBuilder(registry)
    agent = Agent()
    assert builder.build(agent) == builder.build(agent)


def test_build_when_game_over(registry):
    builder = ActionSpaceBuilder(registry)
    assert builder.build(Agent(is_game_over=True)) == restart_space()


def test_custom_bonus_actions(registry):
    builder = ActionSpaceBuilder(registry, bonus_actions=[Action("jump", "Dance")])
    space = builder.build(Agent())
    assert space[0] == Action("jump", "Dance")
    assert space.sentences().count("say hello") == 0


def test_held_pickups_are_not_offered(registry):
    key = registry.find_pickup("key")
    key.picked_up()

    sentences = [a.sentence for a in registry.current_room_actions()]
    assert "Pick up the key" not in sentences
