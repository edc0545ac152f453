"""
Per-symbol JSON persistence of the bot ledger.
"""

import json
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models import BotState

logger = logging.getLogger(__name__)


class StateManager:
    """
    Saves and restores one ``BotState`` per trading symbol.

    Each save keeps the previous file as a ``.backup``; unreadable files
    are quarantined and the backup is tried instead.
    """

    STATE_FILE_TEMPLATE = "bot_state_{symbol}.json"
    BACKUP_SUFFIX = ".backup"

    def __init__(self, state_dir: Optional[str] = None):
        """
        Args:
            state_dir: Where state files live (default ``~/.ladder_dca/state``)
        """
        if state_dir is None:
            state_dir = os.path.join(os.path.expanduser("~"), ".ladder_dca", "state")

        self._state_dir = Path(state_dir)
        self._state_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Bot state directory: {self._state_dir}")

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    def get_state_file_path(self, symbol: str) -> Path:
        return self._state_dir / self.STATE_FILE_TEMPLATE.format(symbol=symbol.upper())

    def get_backup_file_path(self, symbol: str) -> Path:
        primary = self.get_state_file_path(symbol)
        return primary.with_name(primary.name + self.BACKUP_SUFFIX)

    def save_state(self, state: BotState) -> bool:
        """
        Write the state of ``state.symbol``, keeping the previous file as backup.

        Returns:
            True when the file was written; failures are logged, not raised
        """
        primary = self.get_state_file_path(state.symbol)
        backup = self.get_backup_file_path(state.symbol)

        try:
            state.last_update = datetime.now(timezone.utc)
            payload = self._state_to_dict(state)

            if primary.exists():
                shutil.copy2(primary, backup)

            # Readers only ever see a complete file
            pending = primary.with_suffix('.tmp')
            with open(pending, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2)
            pending.replace(primary)

            logger.debug(f"Persisted {state.symbol}: balance {state.balance:.2f}, "
                         f"{len(state.positions)} open lots")
            return True

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not persist state for {state.symbol}: {e}")
            return False

    def load_state(self, symbol: str) -> Optional[BotState]:
        """
        Restore the saved state of ``symbol``.

        The last seen price is not trusted across restarts and comes back
        as 0 until the next tick.

        Returns:
            BotState, or None when neither the file nor its backup is usable
        """
        state = self._read(self.get_state_file_path(symbol))

        if state is None and self.get_backup_file_path(symbol).exists():
            logger.warning(f"Falling back to the backup state of {symbol}")
            state = self._read(self.get_backup_file_path(symbol))
            if state is not None:
                logger.info(f"Restored {symbol} from backup; rewriting primary state file")
                self.save_state(state)

        if state is None:
            logger.info(f"No saved state for {symbol}")
            return None

        state.current_price = 0.0
        return state

    def delete_state(self, symbol: str) -> bool:
        """
        Remove the saved state of ``symbol`` and its backup.

        Returns:
            True if any file was removed
        """
        removed = False
        for path in (self.get_state_file_path(symbol), self.get_backup_file_path(symbol)):
            if path.exists():
                path.unlink()
                removed = True
        if removed:
            logger.info(f"Deleted saved state for {symbol}")
        return removed

    def _read(self, path: Path) -> Optional[BotState]:
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
            state = self._dict_to_state(payload)
        except json.JSONDecodeError as e:
            logger.error(f"{path.name} is not valid JSON: {e}")
            self._quarantine(path)
            return None
        except (ValidationError, OSError, TypeError) as e:
            logger.error(f"{path.name} does not hold a valid bot state: {e}")
            self._quarantine(path)
            return None

        logger.info(f"Loaded {state.symbol} state from {path}")
        return state

    def _quarantine(self, path: Path) -> None:
        """Move an unreadable state file out of the way, keeping it for inspection."""
        target = path.with_name(f'{path.name}.corrupted.{datetime.now().strftime("%Y%m%d_%H%M%S")}')
        try:
            shutil.move(path, target)
            logger.warning(f"Quarantined unreadable state file as {target.name}")
        except OSError as e:
            logger.error(f"Could not quarantine {path}: {e}")

    def _state_to_dict(self, state: BotState) -> Dict[str, Any]:
        return state.model_dump(mode='json')

    def _dict_to_state(self, payload: Dict[str, Any]) -> BotState:
        return BotState.model_validate(payload)
