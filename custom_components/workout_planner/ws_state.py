"""Websocket state helpers."""

from __future__ import annotations

from typing import Any

from .dates import local_now, to_local_date_key


def runtime_payload() -> dict[str, Any]:
    """Values the UI needs to render past/today/future consistently."""
    now = local_now()
    return {"today": to_local_date_key(now), "now": now.isoformat()}


def public_state(state: dict[str, Any], *, runtime: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a stable public payload for the UI."""
    if not isinstance(state, dict):
        return {}
    return {
        "schema": int(state.get("schema") or 1),
        "rev": int(state.get("rev") or 1),
        "planned": state.get("planned", {}),
        "default_schedule": state.get("default_schedule", {}),
        "settings": state.get("settings", {}),
        "workouts": state.get("workouts", []),
        "updated_at": str(state.get("updated_at") or ""),
        "runtime": runtime or {},
    }


def export_config(state: dict[str, Any]) -> dict[str, Any]:
    payload = public_state(state)
    return {k: payload[k] for k in ("planned", "default_schedule", "settings", "workouts")}
