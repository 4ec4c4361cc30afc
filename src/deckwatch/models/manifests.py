"""Vendor manifest models (profile pages and plugins)."""

from __future__ import annotations

from pydantic import BaseModel, Field


class _Manifest(BaseModel):
    model_config = {"extra": "ignore", "populate_by_name": True}


class ActionState(_Manifest):
    title: str | None = Field(default=None, alias="Title")
    image: str | None = Field(default=None, alias="Image")


class PluginRef(_Manifest):
    uuid: str | None = Field(default=None, alias="UUID")


class PageAction(_Manifest):
    name: str | None = Field(default=None, alias="Name")
    uuid: str | None = Field(default=None, alias="UUID")
    state: int = Field(default=0, alias="State")
    states: list[ActionState] | None = Field(default=None, alias="States")
    plugin: PluginRef | None = Field(default=None, alias="Plugin")

    def current_state(self) -> ActionState | None:
        if self.states and 0 <= self.state < len(self.states):
            return self.states[self.state]
        return None


class Controller(_Manifest):
    actions: dict[str, PageAction] | None = Field(default=None, alias="Actions")


class PageManifest(_Manifest):
    controllers: list[Controller] | None = Field(default=None, alias="Controllers")


class ProfileManifest(_Manifest):
    name: str | None = Field(default=None, alias="Name")


class PluginAction(_Manifest):
    uuid: str | None = Field(default=None, alias="UUID")
    states: list[ActionState] | None = Field(default=None, alias="States")


class PluginManifest(_Manifest):
    actions: list[PluginAction] | None = Field(default=None, alias="Actions")

    def find_action(self, action_uuid: str) -> PluginAction | None:
        for action in self.actions or []:
            if action.uuid == action_uuid:
                return action
        return None
