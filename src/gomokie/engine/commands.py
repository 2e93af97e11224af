"""Command and event names understood by the engine process."""

from __future__ import annotations

from enum import StrEnum


class Command(StrEnum):
    """Request names accepted by the engine."""

    # Game
    NEW_GAME = "new_game"
    GET_STATE = "get_state"
    MAKE_MOVE = "make_move"
    AI_MOVE = "ai_move"
    SAVE_GAME = "save_game"
    LOAD_GAME = "load_game"
    EXPORT_TRAINING = "export_training"
    # Ratings / profiles
    GET_RATINGS = "get_ratings"
    SET_MATCH_MODE = "set_match_mode"
    SET_ACTIVE_PROFILE = "set_active_profile"
    CREATE_LLM_PROFILE = "create_llm_profile"
    UPDATE_LLM_PROFILE = "update_llm_profile"
    DELETE_LLM_PROFILE = "delete_llm_profile"
    # Users
    GET_USERS = "get_users"
    CREATE_USER = "create_user"
    SET_ACTIVE_USER = "set_active_user"
    DELETE_USER = "delete_user"
    UPDATE_USER = "update_user"
    # Self-play calibration
    START_SELF_PLAY = "start_self_play"
    STOP_SELF_PLAY = "stop_self_play"


class EngineEvent(StrEnum):
    """Push channels published by the engine during a self-play run."""

    SELF_PLAY_PROGRESS = "self_play_progress"
    SELF_PLAY_DONE = "self_play_done"
    SELF_PLAY_ERROR = "self_play_error"
