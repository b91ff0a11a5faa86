"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Provides lazy RenderKit construction and
centralized result emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lazyfrag.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from lazyfrag.config.settings import LazyfragSettings
    from lazyfrag.infrastructure.kit import RenderKit
    from lazyfrag.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The kit is built on first use so ``--help`` and ``secret`` never
    touch the signing configuration.
    """

    def __init__(self, settings: LazyfragSettings) -> None:
        self.settings = settings
        self._kit: RenderKit | None = None

        from lazyfrag.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            app=settings.entities.app,
        )

    @property
    def kit(self) -> RenderKit:
        """The render kit (created lazily on first access)."""
        if self._kit is None:
            from lazyfrag.infrastructure.kit import RenderKit

            self._kit = RenderKit(self.settings)
        return self._kit

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
