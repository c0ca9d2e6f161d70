# Area: Core
"""
gameshow_sync._core.store — Game state store
============================================

Explicit state handle passed to every consumer (reconciler, timer,
session). Dispatch is synchronous and immediate: the reducer runs,
the new state becomes current, listeners are notified.

This is also the single place where the invalid-action policy lives:
strict stores raise InvalidActionError, lenient stores log a warning
and leave the state untouched.
"""

import logging
from typing import Callable, List, Optional

from .actions import Action, action_to_dict
from .reducer import reduce, validate_action
from .state import GameState, initial_game_state
from ..errors import InvalidActionError

logger = logging.getLogger("gameshow_sync.core.store")

Listener = Callable[[GameState, GameState, Action], None]


class GameStore:
    """
    Holds one client's copy of the game state.

    Attributes:
        strict: If True, invalid actions raise InvalidActionError
        rejected: Number of invalid actions dropped in lenient mode
    """

    def __init__(self, initial: Optional[GameState] = None, strict: bool = False):
        self._state = initial if initial is not None else initial_game_state()
        self.strict = strict
        self.rejected = 0
        self._listeners: List[Listener] = []

    @property
    def state(self) -> GameState:
        return self._state

    def dispatch(self, action: Action) -> GameState:
        """
        Apply an action and return the new current state.

        Args:
            action: The action to apply

        Returns:
            The state after the action

        Raises:
            InvalidActionError: In strict mode, if the action is invalid
        """
        violations = validate_action(self._state, action)
        if violations:
            if self.strict:
                raise InvalidActionError(action.type, action_to_dict(action), violations)
            self.rejected += 1
            logger.warning(f"Ignored invalid {action.type}: {'; '.join(violations)}")
            return self._state

        prev = self._state
        self._state = reduce(prev, action)
        if self._state is not prev:
            self._notify(prev, action)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, prev: GameState, action: Action) -> None:
        for listener in list(self._listeners):
            try:
                listener(prev, self._state, action)
            except Exception as e:
                logger.error(f"State listener failed on {action.type}: {e}", exc_info=True)
