"""Config flow for Workout Planner."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    CONF_NAME,
    CONF_NOTIFY_SERVICE,
    DEFAULT_NAME,
    DEFAULT_NOTIFY_SERVICE,
    DOMAIN,
)


def _clean_notify_service(value: Any) -> str:
    return str(value or "").strip().removeprefix("notify.")


class WorkoutPlannerConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Workout Planner."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        if user_input is not None:
            name = str(user_input.get(CONF_NAME, DEFAULT_NAME)).strip() or DEFAULT_NAME
            await self.async_set_unique_id(name.lower())
            self._abort_if_unique_id_configured()

            return self.async_create_entry(
                title=name,
                data={
                    CONF_NAME: name,
                    CONF_NOTIFY_SERVICE: _clean_notify_service(user_input.get(CONF_NOTIFY_SERVICE)),
                },
            )

        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                vol.Optional(CONF_NOTIFY_SERVICE, default=DEFAULT_NOTIFY_SERVICE): str,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return WorkoutPlannerOptionsFlow(config_entry)


class WorkoutPlannerOptionsFlow(config_entries.OptionsFlow):
    """Handle options for Workout Planner."""

    def __init__(self, config_entry) -> None:
        self._entry = config_entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        if user_input is not None:
            name = str(user_input.get(CONF_NAME, DEFAULT_NAME)).strip() or DEFAULT_NAME
            return self.async_create_entry(
                title="",
                data={
                    CONF_NAME: name,
                    CONF_NOTIFY_SERVICE: _clean_notify_service(user_input.get(CONF_NOTIFY_SERVICE)),
                },
            )

        current_name = self._entry.options.get(CONF_NAME, self._entry.data.get(CONF_NAME, DEFAULT_NAME))
        current_notify = self._entry.options.get(
            CONF_NOTIFY_SERVICE,
            self._entry.data.get(CONF_NOTIFY_SERVICE, DEFAULT_NOTIFY_SERVICE),
        )
        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=str(current_name)): str,
                vol.Optional(CONF_NOTIFY_SERVICE, default=str(current_notify or "")): str,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema)
