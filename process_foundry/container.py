"""
Dependency injection container for managing foundry dependencies.
"""

import logging
from typing import Optional

from process_foundry.adapters.process.local_process_executor import LocalProcessExecutor
from process_foundry.adapters.shell.local_shell import Shell, get_local_shell
from process_foundry.config.settings import Settings
from process_foundry.config.settings import settings as default_settings
from process_foundry.ports.config_loader_port import ComposeConfigLoaderPort
from process_foundry.ports.process_executor_port import ProcessExecutorPort
from process_foundry.registry import AdapterRegistry, default_registry
from process_foundry.topology import ContainerTree
from process_foundry.use_cases.actions.execute_action import ExecuteActionUseCase
from process_foundry.use_cases.discovery.find_application import (
    FindApplicationUseCase,
)
from process_foundry.use_cases.routing.forward_message import ForwardMessageUseCase


class DependencyContainer:
    """
    Container for managing foundry dependencies using dependency injection.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config_loader: Optional[ComposeConfigLoaderPort] = None,
    ):
        self._instances = {}
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._config_loader = config_loader

    def get_settings(self) -> Settings:
        """
        Get settings, defaulting to the ones loaded from the environment.

        Returns:
            Settings instance
        """
        if self._settings is None:
            self._settings = default_settings
        return self._settings

    def get_process_executor(self) -> ProcessExecutorPort:
        """
        Get process executor instance.

        Returns:
            ProcessExecutorPort implementation
        """
        if "process_executor" not in self._instances:
            settings = self.get_settings()
            self._instances["process_executor"] = LocalProcessExecutor(
                self._logger,
                default_timeout=settings.command_timeout,
                sudo_command=settings.sudo_command,
            )
        return self._instances["process_executor"]

    def get_registry(self) -> AdapterRegistry:
        """
        Get the adapter registry with the built-in adapters registered.

        Returns:
            Configured AdapterRegistry
        """
        if "registry" not in self._instances:
            self._instances["registry"] = default_registry(
                self.get_process_executor(),
                loader=self._config_loader,
                logger=self._logger,
                timeout=self.get_settings().command_timeout,
                tree=self.get_container_tree(),
            )
            self._logger.info(str(self._instances["registry"]))
        return self._instances["registry"]

    def get_local_shell(self) -> Shell:
        """
        Get the shell of the machine the foundry runs on.

        Returns:
            Shell wrapping a running BashShell container
        """
        if "local_shell" not in self._instances:
            settings = self.get_settings()
            self._instances["local_shell"] = get_local_shell(
                self.get_process_executor(),
                shell_env=settings.shell,
                logger=self._logger,
                timeout=settings.command_timeout,
            )
        return self._instances["local_shell"]

    def get_container_tree(self) -> ContainerTree:
        """
        Get the container tree, rooted at the local shell.

        Returns:
            ContainerTree owning every live container
        """
        if "container_tree" not in self._instances:
            tree = ContainerTree(self._logger)
            tree.add(self.get_local_shell().running)
            self._instances["container_tree"] = tree
        return self._instances["container_tree"]

    def get_find_application_use_case(self) -> FindApplicationUseCase:
        if "find_application_use_case" not in self._instances:
            self._instances["find_application_use_case"] = FindApplicationUseCase(
                self._logger
            )
        return self._instances["find_application_use_case"]

    def get_forward_message_use_case(self) -> ForwardMessageUseCase:
        """
        Get forward message use case, falling back to the local shell.

        Returns:
            Configured ForwardMessageUseCase
        """
        if "forward_message_use_case" not in self._instances:
            self._instances["forward_message_use_case"] = ForwardMessageUseCase(
                fallback=self.get_local_shell().running,
                tree=self.get_container_tree(),
                logger=self._logger,
            )
        return self._instances["forward_message_use_case"]

    def get_execute_action_use_case(self) -> ExecuteActionUseCase:
        if "execute_action_use_case" not in self._instances:
            self._instances["execute_action_use_case"] = ExecuteActionUseCase(
                self._logger
            )
        return self._instances["execute_action_use_case"]

    def reset(self):
        """Reset all instances (useful for testing)."""
        self._instances.clear()
