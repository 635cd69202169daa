"""App manager: discovers apps and drives their lifecycle for the host."""

from __future__ import annotations

import importlib.util
import inspect
import logging
import os
import sys
from dataclasses import dataclass

from apps.base_app import App
from core.config import HostConfig
from core.exceptions import AppLoadError


@dataclass
class AppState:
    """Lifecycle flags tracked for a loaded app."""
    app: App
    installed: bool = False
    active: bool = False


class AppManager:
    """Constructs apps against a host and sequences their lifecycle calls."""

    def __init__(self, ghost, config: HostConfig):
        self.ghost = ghost
        self.config = config
        self._apps: dict[str, AppState] = {}
        self._logger = self._build_logger(config.apps.log_dir, config.apps.level)

    def discover_apps(self, apps_dir: str | None = None) -> list[str]:
        """Scan the apps directory and load every enabled App subclass."""
        if apps_dir is None:
            apps_dir = self.config.apps.apps_dir

        if not os.path.isdir(apps_dir):
            self._logger.info("Apps directory %s does not exist", apps_dir)
            return []

        loaded: list[str] = []
        for filename in sorted(os.listdir(apps_dir)):
            if not filename.endswith(".py") or filename.startswith("_"):
                continue

            path = os.path.join(apps_dir, filename)
            try:
                module = self._import_file(path)
            except AppLoadError as e:
                self._logger.warning("Failed to load %s: %s", path, e)
                continue

            for _, obj in inspect.getmembers(module, inspect.isclass):
                if not issubclass(obj, App) or obj is App or not obj.name:
                    continue
                if obj.__module__ != module.__name__:
                    continue
                if not self.config.apps.is_enabled(obj.name):
                    self._logger.info("Skipping disabled app %s", obj.name)
                    continue
                if obj.name in self._apps:
                    self._logger.warning("Skipping %s from %s: app already loaded", obj.name, path)
                    continue
                try:
                    self.load_app(obj)
                except Exception as e:
                    self._logger.warning("Failed to construct app %s from %s: %s", obj.name, path, e)
                    continue
                loaded.append(obj.name)

        return loaded

    def load_app(self, app_cls: type[App]) -> App:
        """Construct an app against the host and start tracking it."""
        name = app_cls.name or app_cls.__name__
        if name in self._apps:
            raise AppLoadError(f"App '{name}' is already loaded")

        app = app_cls(self.ghost)
        self._apps[name] = AppState(app=app)
        self._logger.info("Loaded app %s", name)
        return app

    def get_app(self, name: str) -> App:
        return self._state(name).app

    @property
    def app_names(self) -> list[str]:
        """Loaded app names, in load order."""
        return list(self._apps.keys())

    def is_installed(self, name: str) -> bool:
        return self._state(name).installed

    def is_active(self, name: str) -> bool:
        return self._state(name).active

    async def install(self, name: str) -> None:
        state = self._state(name)
        if state.installed:
            return
        await self._settle(state.app.install())
        state.installed = True
        self._logger.info("Installed app %s", name)

    async def uninstall(self, name: str) -> None:
        state = self._state(name)
        if state.active:
            await self.deactivate(name)
        await self._settle(state.app.uninstall())
        state.installed = False
        self._logger.info("Uninstalled app %s", name)

    async def activate(self, name: str) -> None:
        state = self._state(name)
        if state.active:
            return
        await self._settle(state.app.activate())
        state.active = True
        self._logger.info("Activated app %s", name)

    async def deactivate(self, name: str) -> None:
        state = self._state(name)
        if not state.active:
            return
        await self._settle(state.app.deactivate())
        state.active = False
        self._logger.info("Deactivated app %s", name)

    async def activate_all(self) -> None:
        """Install (if needed) and activate every loaded app in load order."""
        for name in self.app_names:
            await self.install(name)
            await self.activate(name)

    async def deactivate_all(self) -> None:
        """Deactivate every active app in reverse load order."""
        for name in reversed(self.app_names):
            await self.deactivate(name)

    def _state(self, name: str) -> AppState:
        state = self._apps.get(name)
        if state is None:
            raise KeyError(f"Unknown app '{name}'. Loaded apps: {self.app_names}")
        return state

    @staticmethod
    async def _settle(result) -> None:
        # Lifecycle methods may return nothing or an awaitable
        if inspect.isawaitable(result):
            await result

    @staticmethod
    def _import_file(path: str):
        module_name = f"ghost_apps.{os.path.splitext(os.path.basename(path))[0]}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise AppLoadError(f"Cannot import {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise AppLoadError(f"Error while importing {path}: {e}") from e
        return module

    def _build_logger(self, log_dir: str, level: int) -> logging.Logger:
        os.makedirs(log_dir, exist_ok=True)
        # One logger per log file, shared by managers writing to the same directory
        logger = logging.getLogger(f"app_manager.{os.path.abspath(log_dir)}")
        logger.setLevel(level)
        if logger.handlers:
            return logger

        log_path = os.path.join(log_dir, "apps.log")
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
        return logger
