"""Console-driven UI loops for the AI Vault."""
from __future__ import annotations

import getpass
import logging
import time
from typing import Any, Dict, List, Literal

from aivault.data.errors import DataError
from aivault.domain.defs import MetaStepDef, PuzzleDef
from aivault.presentation.cli import config as cli_config
from aivault.presentation.cli.render import (
    debug_enabled,
    format_badge_line,
    format_room_line,
    render_box,
    render_bullet_lines,
    render_heading,
    render_menu,
)
from aivault.services import (
    ConfigurationError,
    GameService,
    GameSummary,
    RoomLockedError,
    SubmissionResult,
    build_game_service,
)
from aivault.services.ai_client import PROVIDERS

logger = logging.getLogger(__name__)

MenuAction = Literal["new_game", "continue", "quit"]


def main() -> None:
    """Start the interactive CLI session."""
    config = cli_config.apply_env_overrides(cli_config.load_config())
    try:
        service = build_game_service(config, save_path=cli_config.get_save_path())
        service.rooms_repo.load()
    except DataError as exc:
        print(f"Could not load the puzzle catalog: {exc}")
        return
    print("=== The AI Vault ===")
    try:
        _run(service, config)
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        service.shutdown()
    print("Goodbye!")


def _run(service: GameService, config: Dict[str, Any]) -> None:
    while True:
        action = _title_menu(service)
        if action == "quit":
            return
        if action == "continue" and service.continue_game():
            service.set_sound(bool(config.get("sound_enabled", True)))
        else:
            if action == "continue":
                print("No saved game could be loaded. Starting fresh.")
            service.new_game()
            service.set_sound(bool(config.get("sound_enabled", True)))
            _settings_screen(service, config)
        if not _hub_loop(service):
            return


def _prompt(service: GameService, message: str) -> str:
    service.tick()
    service.flush()
    return input(message).strip()


def _prompt_index(service: GameService, count: int, message: str = "Select an option: ") -> int:
    while True:
        raw = _prompt(service, message)
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < count:
            return index
        print(f"Please enter a value between 1 and {count}.")


def _title_menu(service: GameService) -> MenuAction:
    actions: List[MenuAction] = ["new_game"]
    labels = ["New Game"]
    if service.has_save():
        actions.append("continue")
        labels.append("Continue")
    actions.append("quit")
    labels.append("Quit")
    render_menu("Main Menu", labels)
    return actions[_prompt_index(service, len(actions))]


def _settings_screen(service: GameService, config: Dict[str, Any]) -> None:
    if config.get("api_key"):
        service.configure_ai(config.get("ai_provider"), config["api_key"])
    while True:
        provider = service.store.get("settings.aiProvider")
        sound = service.store.get("settings.soundEnabled")
        render_menu(
            "Settings",
            [
                f"AI hints: {provider or 'offline'}",
                f"Sound: {'on' if sound else 'off'}",
                "Enter the vault",
            ],
        )
        choice = _prompt_index(service, 3)
        if choice == 0:
            _configure_ai(service, config)
        elif choice == 1:
            service.set_sound(not sound)
            config["sound_enabled"] = not sound
        else:
            cli_config.save_config(config)
            return


def _configure_ai(service: GameService, config: Dict[str, Any]) -> None:
    providers = list(PROVIDERS)
    render_menu("AI Provider", [*providers, "Offline (authored hints only)"])
    index = _prompt_index(service, len(providers) + 1)
    if index == len(providers):
        service.configure_ai(None, None)
        config["ai_provider"] = None
        config.pop("api_key", None)
        return
    provider = providers[index]
    api_key = getpass.getpass(f"{provider} API key (kept for this session only): ").strip()
    if service.configure_ai(provider, api_key):
        config["ai_provider"] = provider
        config["api_key"] = api_key
        print(f"Live hints enabled via {provider}.")
    else:
        print("No key entered; staying offline.")


def _hub_loop(service: GameService) -> bool:
    """Run the room-select hub; return False when the player quits the game."""
    while True:
        statuses = service.enter_room_select()
        render_heading(f"Room Select  (time {service.timer.formatted()}, score {service.store.get('score.points')})")
        labels = [
            format_room_line(
                status.room.name,
                unlocked=status.unlocked,
                completed=status.completed,
                solved=status.solved,
                total=status.total,
            )
            for status in statuses
        ]
        vault_open = bool(service.store.get("metaPuzzleUnlocked"))
        if vault_open:
            labels.append("Open the Vault")
        labels.extend(["Badges", "Main menu", "Quit"])
        for idx, label in enumerate(labels, start=1):
            print(f"{idx}. {label}")
        index = _prompt_index(service, len(labels))
        if index < len(statuses):
            _room_screen(service, statuses[index].room.room_id)
            continue
        label = labels[index]
        if label == "Open the Vault":
            if _meta_screen(service):
                _end_screen(service, service.finish_game())
                return True
        elif label == "Badges":
            _badges_screen(service)
        elif label == "Main menu":
            return True
        else:
            return False


def _room_screen(service: GameService, room_id: str) -> None:
    try:
        entry = service.enter_room(room_id)
    except RoomLockedError:
        print("That room is still locked. Complete the previous room first.")
        return
    except ConfigurationError as exc:
        logger.error("Could not load room %s: %s", room_id, exc)
        print(f"Could not load that room: {exc}")
        return
    room = entry.room
    greeting = service.character_line(room.character, "greeting")
    render_box(room.name, [room.intro_narration, greeting] if greeting else [room.intro_narration])
    if entry.complete:
        print(f"Room complete. Artifact recovered: {room.artifact.name}.")
        return
    while True:
        puzzle = service.current_puzzle()
        if puzzle is None:
            return
        _render_puzzle(service, puzzle)
        raw = _prompt(service, "Answer ('hint' for a hint, 'back' to leave): ")
        if raw.lower() == "back":
            return
        if raw.lower() == "hint":
            _show_hint(service)
            continue
        try:
            result = service.submit_text(raw)
        except ConfigurationError as exc:
            print(f"Could not submit that answer: {exc}")
            return
        _render_submission(service, puzzle, result)
        if result.advance_pending:
            _wait_for_scheduler(service)
        if result.room_completed or service.current_puzzle() is None:
            print(f"\nRoom complete! Artifact recovered: {room.artifact.name}")
            print(f"Clue: {room.artifact.meta_clue}")
            return


def _render_puzzle(service: GameService, puzzle: PuzzleDef) -> None:
    cursor = service.progression.cursor + 1
    total = len(service.progression.current_room.puzzles) if service.progression.current_room else cursor
    body = [puzzle.description, f"Answer with {service.registry.answer_format(puzzle)}."]
    if debug_enabled():
        body.append(f"[{puzzle.puzzle_id} | {puzzle.kind.value} | attempts {service.progression.attempts}]")
    render_box(f"Puzzle {cursor}/{total}: {puzzle.title}", body)


def _render_submission(service: GameService, puzzle: PuzzleDef, result: SubmissionResult) -> None:
    outcome = result.outcome
    if outcome.ai_response:
        render_box("AI response", [outcome.ai_response])
    if outcome.feedback:
        print(outcome.feedback)
    if result.correct and result.result is not None:
        print(f"Solved in {result.attempts} attempt(s) for {result.result.score} points.")
        mood = "success"
    else:
        wrong = [key for key, ok in outcome.detail.items() if not ok and key != "answer"]
        if wrong:
            print(f"Check: {', '.join(wrong)}")
        mood = "failure"
    line = service.character_line(puzzle.character, mood)
    if line:
        print(line)


def _show_hint(service: GameService) -> None:
    if service.hints.hints_remaining() <= 0:
        print("No hints remaining.")
        return
    hint = service.request_hint()
    if hint is None:
        print("That hint arrived too late for this puzzle.")
        return
    source = "AI" if hint.source == "ai" else "Hint"
    print(f"[{source}] {hint.text}")
    print(f"Hints remaining: {service.hints.hints_remaining()}")


def _wait_for_scheduler(service: GameService) -> None:
    service.flush()
    deadline = service.scheduler.next_deadline()
    while deadline is not None:
        time.sleep(max(deadline - service.scheduler.now(), 0.0))
        service.tick()
        service.flush()
        deadline = service.scheduler.next_deadline()


def _meta_screen(service: GameService) -> bool:
    try:
        step: MetaStepDef | None = service.enter_meta_puzzle()
    except ConfigurationError as exc:
        print(f"Could not open the vault: {exc}")
        return False
    render_box(service.meta.definition.title, [f"{artifact.name}: {artifact.meta_clue}" for artifact in service.meta.artifacts()])
    while step is not None:
        print(f"\nStep {service.meta.step_index + 1}/{service.meta.total_steps}: {step.instruction}")
        if step.input_type == "choice":
            render_bullet_lines(step.options)
        elif step.input_type == "slider":
            print(f"(Enter a value from {step.minimum:g} to {step.maximum:g})")
        raw = _prompt(service, "> ")
        if raw.lower() == "back":
            return False
        result = service.check_meta_step(raw)
        if not result.correct:
            print("The vault rejects that input.")
            continue
        if result.complete:
            print("\nThe vault door swings open!")
            return True
        step = service.meta.current_step
    return False


def _badges_screen(service: GameService) -> None:
    render_heading("Badges")
    for status in service.achievements.all_badges():
        badge = status.definition
        print(format_badge_line(badge.icon, badge.name, badge.criteria, earned=status.earned))


def _end_screen(service: GameService, summary: GameSummary) -> None:
    render_box(
        "Vault Cleared",
        [
            f"Final score: {summary.points}",
            f"Time: {summary.formatted_time}",
            f"Hints used: {summary.hints_used}",
        ],
    )
    render_heading("Artifacts")
    render_bullet_lines(artifact.name for artifact in summary.artifacts)
    render_heading("Accuracy")
    for room_id, stats in summary.accuracy.items():
        print(f"- {room_id}: {stats.get('firstAttempt', 0)}/{stats.get('solved', 0)} first try")
    _badges_screen(service)
    _prompt(service, "\nPress Enter to return to the main menu.")
