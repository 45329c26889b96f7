"""Session orchestration wiring the engines to one state store."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping

import requests

from aivault.core.scheduling import Scheduler
from aivault.core.store import PathStore
from aivault.core.types import Clock
from aivault.data.repositories import (
    BadgesRepository,
    CharactersRepository,
    MetaPuzzleRepository,
    RoomsRepository,
)
from aivault.domain.defs import ArtifactDef, MetaStepDef, PuzzleDef, RoomDef
from aivault.domain.state import default_state
from aivault.services.achievement_service import AchievementEngine, BadgeStatus
from aivault.services.ai_client import PROVIDERS, AIProviderClient, Hint, PromptEvaluationService
from aivault.services.errors import ConfigurationError
from aivault.services.hint_service import HintPolicy
from aivault.services.meta_puzzle_service import MetaPuzzleService, MetaStepResult
from aivault.services.persistence_service import PersistenceGateway
from aivault.services.progression_service import ProgressionEngine, RoomEntry, SubmissionResult
from aivault.services.puzzle_registry import PuzzleRegistry
from aivault.services.save_storage import SaveFileStore
from aivault.services.timer_service import GameTimer, format_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoomStatus:
    room: RoomDef
    unlocked: bool
    completed: bool
    solved: int

    @property
    def total(self) -> int:
        return len(self.room.puzzles)


@dataclass(frozen=True, slots=True)
class GameSummary:
    points: int
    elapsed: int
    formatted_time: str
    hints_used: int
    badges: List[BadgeStatus]
    artifacts: List[ArtifactDef]
    accuracy: Dict[str, Any]


class GameService:
    """Facade the console front end talks to; owns one game session."""

    def __init__(
        self,
        *,
        store: PathStore,
        scheduler: Scheduler,
        persistence: PersistenceGateway,
        rooms_repo: RoomsRepository,
        characters_repo: CharactersRepository,
        ai_client: AIProviderClient,
        registry: PuzzleRegistry,
        timer: GameTimer,
        progression: ProgressionEngine,
        achievements: AchievementEngine,
        hints: HintPolicy,
        meta: MetaPuzzleService,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.persistence = persistence
        self.rooms_repo = rooms_repo
        self.characters_repo = characters_repo
        self.ai_client = ai_client
        self.registry = registry
        self.timer = timer
        self.progression = progression
        self.achievements = achievements
        self.hints = hints
        self.meta = meta
        self._dialogue_turn = 0

    # ------------------------------------------------------------- Lifecycle

    def has_save(self) -> bool:
        return self.persistence.has_save()

    def new_game(self) -> None:
        self.progression.reset()
        self.timer.reset()
        self.persistence.clear_save()
        self.store.set("currentScreen", "settings")

    def continue_game(self) -> bool:
        """Load the saved game; return False when there is nothing usable."""
        if not self.persistence.load():
            return False
        self.enter_room_select()
        return True

    def configure_ai(self, provider: str | None, api_key: str | None) -> bool:
        """Enable live AI for this session; the key is kept in memory only."""
        if not provider or provider not in PROVIDERS or not api_key:
            self.ai_client.disable()
            self.store.set("settings.aiProvider", None)
            return False
        self.ai_client.configure(api_key, provider)
        self.store.set("settings.aiProvider", provider)
        return True

    def set_sound(self, enabled: bool) -> None:
        self.store.set("settings.soundEnabled", bool(enabled))

    def tick(self) -> int:
        """Run due deferred work and fold elapsed play time into the state."""
        ran = self.scheduler.run_pending()
        self.timer.sync()
        return ran

    def flush(self) -> None:
        self.persistence.flush()

    def shutdown(self) -> None:
        self.timer.pause()
        self.persistence.save()
        self.persistence.close()
        self.achievements.close()

    # ------------------------------------------------------------ Navigation

    def enter_room_select(self) -> List[RoomStatus]:
        self.timer.start()
        if self.progression.current_room is not None:
            self.progression.exit_room()
        else:
            self.store.set("currentScreen", "room-select")
        return self.room_statuses()

    def room_statuses(self) -> List[RoomStatus]:
        return [
            RoomStatus(
                room=room,
                unlocked=bool(self.store.get(f"rooms.{room.room_id}.unlocked")),
                completed=bool(self.store.get(f"rooms.{room.room_id}.completed")),
                solved=self.progression.room_progress(room.room_id),
            )
            for room in self.rooms_repo.all()
        ]

    def enter_room(self, room_id: str) -> RoomEntry:
        return self.progression.enter_room(room_id)

    def return_to_hub(self) -> List[RoomStatus]:
        return self.enter_room_select()

    # --------------------------------------------------------------- Puzzles

    def current_puzzle(self) -> PuzzleDef | None:
        return self.progression.current_puzzle

    def submit_text(self, text: str) -> SubmissionResult:
        puzzle = self.progression.current_puzzle
        if puzzle is None:
            raise ConfigurationError("No puzzle is active.")
        answer = self.registry.parse_answer(puzzle, text)
        return self.progression.submit_answer(puzzle, answer)

    def request_hint(self) -> Hint | None:
        return self.hints.request_hint_for(self.progression)

    def character_line(self, character_id: str, mood: str) -> str:
        """Pick the character's canned dialogue for ``mood``, prefixed with their name."""
        if not self.characters_repo.has(character_id):
            return ""
        character = self.characters_repo.get(character_id)
        lines = character.fallback_dialogue.get(mood) or ()
        if not lines:
            return ""
        line = lines[self._dialogue_turn % len(lines)]
        self._dialogue_turn += 1
        return f"{character.emoji} {character.name}: {line}"

    # ------------------------------------------------------------ End game

    def enter_meta_puzzle(self) -> MetaStepDef:
        return self.meta.enter()

    def check_meta_step(self, answer: Any) -> MetaStepResult:
        return self.meta.check_step(answer)

    def finish_game(self) -> GameSummary:
        if not self.store.get("gameComplete"):
            raise ConfigurationError("The vault has not been opened yet.")
        self.store.set("currentScreen", "end")
        elapsed = self.timer.elapsed()
        return GameSummary(
            points=self.store.get("score.points") or 0,
            elapsed=elapsed,
            formatted_time=format_duration(elapsed),
            hints_used=self.store.get("hints.used") or 0,
            badges=self.achievements.all_badges(),
            artifacts=self.meta.artifacts(),
            accuracy=dict(self.store.get("score.accuracy") or {}),
        )


def build_game_service(
    config: Mapping[str, Any] | None = None,
    *,
    base_path: Path | str | None = None,
    save_path: Path | str,
    session: requests.Session | None = None,
    clock: Clock | None = None,
    wall_clock: Clock | None = None,
) -> GameService:
    """Construct the default object graph for one session."""
    config = dict(config or {})
    store = PathStore(default_state())
    scheduler = Scheduler(clock=clock)
    persistence = PersistenceGateway(store, SaveFileStore(save_path), scheduler)

    characters_repo = CharactersRepository(base_path)
    rooms_repo = RoomsRepository(characters_repo=characters_repo, base_path=base_path)
    badges_repo = BadgesRepository(base_path)
    meta_repo = MetaPuzzleRepository(base_path)

    ai_client = AIProviderClient(session=session)
    registry = PuzzleRegistry(PromptEvaluationService(client=ai_client))
    timer = GameTimer(store, clock=clock, wall_clock=wall_clock)
    progression = ProgressionEngine(
        store,
        rooms_repo=rooms_repo,
        registry=registry,
        timer=timer,
        scheduler=scheduler,
        pacing_delay=float(config.get("pacing_seconds", 0.0) or 0.0),
        clock=clock,
    )
    achievements = AchievementEngine(store, rooms_repo=rooms_repo, badges_repo=badges_repo)
    hints = HintPolicy(store, client=ai_client, clock=clock)
    meta = MetaPuzzleService(store, meta_repo=meta_repo, achievements=achievements, timer=timer)

    service = GameService(
        store=store,
        scheduler=scheduler,
        persistence=persistence,
        rooms_repo=rooms_repo,
        characters_repo=characters_repo,
        ai_client=ai_client,
        registry=registry,
        timer=timer,
        progression=progression,
        achievements=achievements,
        hints=hints,
        meta=meta,
    )
    api_key = config.get("api_key")
    if api_key:
        service.configure_ai(config.get("ai_provider") or "openai", api_key)
    logger.debug("Game service built with catalog at %s", base_path or "default location")
    return service
